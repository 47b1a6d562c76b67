from typing import Optional, List
from pydantic import BaseModel, Field

from app.models.enums import MatchStatus, Side
from app.models.format import Format
from app.models.group import Team


class ScoreSnapshot(BaseModel):
    team1_score: int = Field(ge=0)
    team2_score: int = Field(ge=0)
    server: Optional[str] = None
    receiver: Optional[str] = None


class Game(BaseModel):
    team1_score: int = Field(default=0, ge=0)
    team2_score: int = Field(default=0, ge=0)
    server: Optional[str] = None
    receiver: Optional[str] = None
    history: List[ScoreSnapshot] = Field(default_factory=list)


class MatchShell(BaseModel):
    """A scheduled match as it is first stored, before any umpire touches it"""
    format_id: str
    group_id: str
    team1_id: str
    team2_id: str
    schedule_order: int = 0
    umpire_id: Optional[str] = None
    winner_id: Optional[str] = None
    result: MatchStatus = MatchStatus.PENDING
    games: List[Game] = Field(default_factory=list)
    version: int = 0


class Match(MatchShell):
    id: str


class MatchWithFormat(Match):
    format: Format


class MatchDetails(BaseModel):
    match: Match
    team1: Team
    team2: Team


class PointScored(BaseModel):
    team: Side
    # Player serving and receiving this rally; omitted values keep the current ones
    server: Optional[str] = None
    receiver: Optional[str] = None


class MatchScoreUpdate(BaseModel):
    team1_score: int = Field(ge=0)
    team2_score: int = Field(ge=0)
    result: MatchStatus
