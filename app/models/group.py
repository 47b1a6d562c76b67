from typing import Optional, List
from pydantic import BaseModel, Field, model_validator


class TeamCreate(BaseModel):
    player1_name: str = Field(min_length=1)
    player2_name: Optional[str] = None


class Team(TeamCreate):
    id: str
    group_id: str


class GroupCreate(BaseModel):
    format_id: str
    group_name: str = Field(min_length=1)
    team_count: Optional[int] = Field(default=None, ge=0)
    teams: List[TeamCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def team_count_matches_teams(self):
        if self.team_count is None:
            self.team_count = len(self.teams)
        elif self.team_count != len(self.teams):
            raise ValueError(f"team_count is {self.team_count} but {len(self.teams)} teams were given")
        return self


class Group(BaseModel):
    id: str
    format_id: str
    group_name: str
    team_count: int


class GroupWithTeams(Group):
    teams: List[Team] = Field(default_factory=list)
