import math
from enum import Enum, IntEnum


class MatchStatus(IntEnum):
    PENDING = 0
    IN_PROGRESS = 1
    CANCELLED = 2
    TEAM1_WINS = 3
    TEAM2_WINS = 4
    TEAM1_RETIRES = 5
    TEAM2_RETIRES = 6
    TEAM1_ABSENT = 7
    TEAM2_ABSENT = 8


TERMINAL_STATUSES = frozenset({
    MatchStatus.TEAM1_WINS,
    MatchStatus.TEAM2_WINS,
    MatchStatus.TEAM1_RETIRES,
    MatchStatus.TEAM2_RETIRES,
    MatchStatus.TEAM1_ABSENT,
    MatchStatus.TEAM2_ABSENT,
})

# Results an umpire can declare while scoring; everything else is administrative
SCORED_RESULTS = frozenset({MatchStatus.TEAM1_WINS, MatchStatus.TEAM2_WINS})


def is_terminal(status: MatchStatus) -> bool:
    """Whether a match with this status has been decided"""
    return status in TERMINAL_STATUSES


class BestOf(IntEnum):
    ONE = 1
    THREE = 3
    FIVE = 5

    @property
    def games_to_win(self) -> int:
        return math.ceil(self.value / 2)


class WinCondition(IntEnum):
    EXACT = 0
    TWO_POINT_MARGIN = 1


class PlayOffFormat(IntEnum):
    SINGLE_ELIMINATION = 0
    DOUBLE_ELIMINATION = 1


class FormatType(IntEnum):
    MEN_SINGLES = 0
    WOMEN_SINGLES = 1
    MEN_DOUBLES = 2
    WOMEN_DOUBLES = 3
    MIXED_DOUBLES = 4


class Side(str, Enum):
    TEAM1 = "team1"
    TEAM2 = "team2"
