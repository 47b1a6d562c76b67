"""
Live scoring state machine for a single match.

PENDING -> IN_PROGRESS (umpire claims the match) -> TEAM1_WINS / TEAM2_WINS
(decided by the score engine). IN_PROGRESS is re-entrant: every point keeps it
there until a side has won enough games.
"""
from typing import Optional

from app.exceptions import (
    AuthorizationError,
    MatchNotInProgressError,
    NothingToUndoError,
    ValidationError,
)
from app.models.enums import MatchStatus, SCORED_RESULTS, Side, is_terminal
from app.models.format import Format
from app.models.match import Game, Match, ScoreSnapshot
from app.utils.logging import get_logger
from app.utils.scoring import (
    game_winner,
    games_needed_to_win,
    is_game_decided,
    is_match_decided,
    is_reachable_score,
)

logger = get_logger(__name__)

# Statuses an umpire may still submit while scoring
UMPIRE_RESULTS = SCORED_RESULTS | {MatchStatus.IN_PROGRESS}


class MatchStateMachine:
    """
    Applies umpire actions to a match.

    Checks run before any mutation, so a rejected action leaves the match
    exactly as it was.
    """

    def __init__(self, match: Match, fmt: Format):
        self.match = match
        self.format = fmt

    @property
    def current_game(self) -> Optional[Game]:
        return self.match.games[-1] if self.match.games else None

    def assign_umpire(self, umpire_id: str) -> bool:
        """Claim the match for an umpire. Returns False if it is already claimed."""
        if is_terminal(self.match.result):
            logger.info(f"Match {self.match.id} is already decided")
            return False
        if self.match.umpire_id or self.match.result != MatchStatus.PENDING:
            logger.info(f"Match {self.match.id} already claimed by {self.match.umpire_id}")
            return False

        self.match.umpire_id = umpire_id
        self.match.result = MatchStatus.IN_PROGRESS
        if not self.match.games:
            self.match.games.append(Game())
        logger.info(f"Umpire {umpire_id} claimed match {self.match.id}")
        return True

    def record_point(
        self,
        side: Side,
        caller_id: str,
        server: Optional[str] = None,
        receiver: Optional[str] = None,
    ) -> Match:
        """Score a rally for one side. Server and receiver carry over when omitted."""
        self._require_in_progress()
        self._authorize(caller_id)

        side = Side(side)
        game = self.current_game
        server = server or (game.server if game else None)
        receiver = receiver or (game.receiver if game else None)
        if server and server == receiver:
            raise ValidationError("Server and receiver must be different players")

        if not self.match.games:
            self.match.games.append(Game())
            game = self.current_game
        game.history.append(self._snapshot(game))
        game.server = server
        game.receiver = receiver
        if side is Side.TEAM1:
            game.team1_score += 1
        else:
            game.team2_score += 1

        self._advance()
        return self.match

    def undo_last_point(self, caller_id: str) -> Match:
        if self.match.result not in UMPIRE_RESULTS:
            raise MatchNotInProgressError(self.match.id)
        self._authorize(caller_id)

        game = self.current_game
        if game is None or not game.history:
            raise NothingToUndoError()

        previous = game.history.pop()
        game.team1_score = previous.team1_score
        game.team2_score = previous.team2_score
        game.server = previous.server
        game.receiver = previous.receiver

        if is_terminal(self.match.result):
            logger.info(f"Decision on match {self.match.id} rolled back by undo")
            self.match.result = MatchStatus.IN_PROGRESS
            self.match.winner_id = None
        return self.match

    def update_final_score(
        self,
        team1_score: int,
        team2_score: int,
        result: MatchStatus,
        caller_id: str,
    ) -> Match:
        """
        Override the active game's score and declare the match state.

        A declared win treats the active game as finished; the declared side
        must then have won enough games. A declared IN_PROGRESS must not leave
        the match already decided.
        """
        self._require_in_progress()
        self._authorize(caller_id)

        if team1_score < 0 or team2_score < 0:
            raise ValidationError("Scores cannot be negative")
        try:
            result = MatchStatus(result)
        except ValueError:
            raise ValidationError(f"Unknown match result {result}")
        if result not in UMPIRE_RESULTS:
            raise ValidationError("Only IN_PROGRESS, TEAM1_WINS or TEAM2_WINS can be submitted with a score")

        if not is_reachable_score(team1_score, team2_score, self.format):
            raise ValidationError(f"A game cannot reach {team1_score}-{team2_score} under this format")

        games = [game.model_copy(deep=True) for game in self.match.games] or [Game()]
        active = games[-1]
        if (active.team1_score, active.team2_score) != (team1_score, team2_score):
            active.history.append(self._snapshot(active))
            active.team1_score = team1_score
            active.team2_score = team2_score

        if result in SCORED_RESULTS:
            self._check_declared_win(games, result)
            self.match.games = games
            self._decide(result)
            return self.match

        if is_match_decided(games, self.format) is not None:
            raise ValidationError("Match result does not match the overall scores")

        if is_game_decided(team1_score, team2_score, self.format):
            games.append(Game())
        self.match.games = games
        return self.match

    def _check_declared_win(self, games, result: MatchStatus):
        final = games[-1]
        if game_winner(final.team1_score, final.team2_score) is None:
            raise ValidationError("The final game cannot end in a tie")

        # Earlier games closed through the score engine; the final one is closed by declaration
        wins = {Side.TEAM1: 0, Side.TEAM2: 0}
        for game in games[:-1]:
            if is_game_decided(game.team1_score, game.team2_score, self.format):
                wins[game_winner(game.team1_score, game.team2_score)] += 1
        wins[game_winner(final.team1_score, final.team2_score)] += 1

        declared = Side.TEAM1 if result == MatchStatus.TEAM1_WINS else Side.TEAM2
        other = Side.TEAM2 if declared is Side.TEAM1 else Side.TEAM1
        needed = games_needed_to_win(self.format.group_best_of)
        if wins[declared] < needed or wins[other] >= needed:
            raise ValidationError("Match result does not match the overall scores")

    @staticmethod
    def _snapshot(game: Game) -> ScoreSnapshot:
        return ScoreSnapshot(
            team1_score=game.team1_score,
            team2_score=game.team2_score,
            server=game.server,
            receiver=game.receiver,
        )

    def _advance(self):
        game = self.current_game
        if not is_game_decided(game.team1_score, game.team2_score, self.format):
            return

        logger.info(
            f"Game {len(self.match.games)} of match {self.match.id} finished "
            f"{game.team1_score}-{game.team2_score}"
        )
        result = is_match_decided(self.match.games, self.format)
        if result is None:
            self.match.games.append(Game())
        else:
            self._decide(result)

    def _decide(self, result: MatchStatus):
        self.match.result = result
        self.match.winner_id = self.match.team1_id if result == MatchStatus.TEAM1_WINS else self.match.team2_id
        logger.info(f"Match {self.match.id} decided: {result.name}, winner {self.match.winner_id}")

    def _authorize(self, caller_id: str):
        if not self.match.umpire_id or caller_id != self.match.umpire_id:
            raise AuthorizationError()

    def _require_in_progress(self):
        if self.match.result != MatchStatus.IN_PROGRESS:
            raise MatchNotInProgressError(self.match.id)
