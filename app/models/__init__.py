# Models package - Export all models for easy importing
from .enums import MatchStatus, BestOf, WinCondition, PlayOffFormat, FormatType, Side, is_terminal
from .format import FormatCreate, Format
from .group import TeamCreate, Team, GroupCreate, Group, GroupWithTeams
from .match import (
    ScoreSnapshot,
    Game,
    MatchShell,
    Match,
    MatchWithFormat,
    MatchDetails,
    PointScored,
    MatchScoreUpdate,
)
from .auth import TokenData, CurrentUser

__all__ = [
    # Enums
    "MatchStatus",
    "BestOf",
    "WinCondition",
    "PlayOffFormat",
    "FormatType",
    "Side",
    "is_terminal",

    # Format models
    "FormatCreate",
    "Format",

    # Group and team models
    "TeamCreate",
    "Team",
    "GroupCreate",
    "Group",
    "GroupWithTeams",

    # Match models
    "ScoreSnapshot",
    "Game",
    "MatchShell",
    "Match",
    "MatchWithFormat",
    "MatchDetails",
    "PointScored",
    "MatchScoreUpdate",

    # Auth models
    "TokenData",
    "CurrentUser",
]
