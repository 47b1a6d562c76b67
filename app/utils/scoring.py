"""
Game and match decisions for live scoring.

Everything here is a pure function of the scores and the group-stage fields of
a format; mutation happens in the match state machine.
"""
from typing import Iterable, Optional

from app.models.enums import BestOf, MatchStatus, Side, WinCondition
from app.models.format import Format
from app.models.match import Game


def games_needed_to_win(best_of: BestOf) -> int:
    """Games a side must win to take a best-of-N match"""
    return BestOf(best_of).games_to_win


def is_game_decided(team1_score: int, team2_score: int, fmt: Format) -> bool:
    """
    Whether a game with this score is over under the format's rules.

    A tied score is never decided, so a decided game always has a winner.
    """
    if team1_score == team2_score:
        return False

    leading = max(team1_score, team2_score)
    trailing = min(team1_score, team2_score)

    if leading >= fmt.group_max_score:
        return True

    if fmt.group_win_condition == WinCondition.EXACT:
        return team1_score == fmt.group_target_score or team2_score == fmt.group_target_score

    return leading >= fmt.group_target_score and leading - trailing >= 2


def is_reachable_score(team1_score: int, team2_score: int, fmt: Format) -> bool:
    """
    Whether a game can arrive at this score one point at a time.

    A score is unreachable when it exceeds the cap or when every way of
    getting there passes through a score that already ended the game.
    """
    if team1_score < 0 or team2_score < 0:
        return False
    if max(team1_score, team2_score) > fmt.group_max_score:
        return False

    reachable = [[False] * (team2_score + 1) for _ in range(team1_score + 1)]
    reachable[0][0] = True
    for t1 in range(team1_score + 1):
        for t2 in range(team2_score + 1):
            if t1 == 0 and t2 == 0:
                continue
            from_team1_point = t1 > 0 and reachable[t1 - 1][t2] and not is_game_decided(t1 - 1, t2, fmt)
            from_team2_point = t2 > 0 and reachable[t1][t2 - 1] and not is_game_decided(t1, t2 - 1, fmt)
            reachable[t1][t2] = from_team1_point or from_team2_point
    return reachable[team1_score][team2_score]


def game_winner(team1_score: int, team2_score: int) -> Optional[Side]:
    if team1_score > team2_score:
        return Side.TEAM1
    if team2_score > team1_score:
        return Side.TEAM2
    return None


def count_games_won(games: Iterable[Game], fmt: Format) -> dict:
    """Completed games won by each side"""
    wins = {Side.TEAM1: 0, Side.TEAM2: 0}
    for game in games:
        if not is_game_decided(game.team1_score, game.team2_score, fmt):
            continue
        wins[game_winner(game.team1_score, game.team2_score)] += 1
    return wins


def is_match_decided(games: Iterable[Game], fmt: Format) -> Optional[MatchStatus]:
    """TEAM1_WINS or TEAM2_WINS once a side has won enough games, else None"""
    needed = games_needed_to_win(fmt.group_best_of)
    wins = count_games_won(games, fmt)

    if wins[Side.TEAM1] >= needed:
        return MatchStatus.TEAM1_WINS
    if wins[Side.TEAM2] >= needed:
        return MatchStatus.TEAM2_WINS
    return None
