from typing import Optional
from pydantic import BaseModel, Field, model_validator

from app.models.enums import BestOf, FormatType, PlayOffFormat, WinCondition


class FormatCreate(BaseModel):
    tournament_id: Optional[str] = None
    format_type: FormatType = FormatType.MEN_SINGLES
    num_of_groups: int = Field(default=1, ge=1)
    group_target_score: int = Field(ge=1, description="Score at which a game can end")
    group_max_score: int = Field(ge=1, description="Hard cap, reaching it ends the game")
    group_win_condition: WinCondition = WinCondition.TWO_POINT_MARGIN
    group_best_of: BestOf = BestOf.THREE
    # Playoff stage configuration is stored but not acted upon
    playoff_target_score: Optional[int] = Field(default=None, ge=1)
    playoff_max_score: Optional[int] = Field(default=None, ge=1)
    playoff_win_condition: Optional[WinCondition] = None
    playoff_best_of: Optional[BestOf] = None
    playoff_format: PlayOffFormat = PlayOffFormat.SINGLE_ELIMINATION

    @model_validator(mode="after")
    def max_score_not_below_target(self):
        if self.group_max_score < self.group_target_score:
            raise ValueError("group_max_score cannot be lower than group_target_score")
        if (
            self.playoff_target_score is not None
            and self.playoff_max_score is not None
            and self.playoff_max_score < self.playoff_target_score
        ):
            raise ValueError("playoff_max_score cannot be lower than playoff_target_score")
        return self


class Format(FormatCreate):
    id: str
