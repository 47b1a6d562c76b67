import pytest

from app.exceptions import (
    AuthorizationError,
    MatchNotInProgressError,
    NothingToUndoError,
    PreconditionError,
    ValidationError,
)
from app.models import BestOf, MatchStatus, Side
from app.services.match_state import MatchStateMachine

from conftest import make_format, make_match

UMPIRE = "umpire-1"


def claimed_machine(fmt, **match_fields) -> MatchStateMachine:
    machine = MatchStateMachine(make_match(**match_fields), fmt)
    assert machine.assign_umpire(UMPIRE)
    return machine


def play_game(machine: MatchStateMachine, team1_points: int, team2_points: int):
    """Score a game so the leader reaches their total last"""
    if team1_points >= team2_points:
        points = [Side.TEAM2] * team2_points + [Side.TEAM1] * team1_points
    else:
        points = [Side.TEAM1] * team1_points + [Side.TEAM2] * team2_points
    for side in points:
        machine.record_point(side, UMPIRE)


class TestAssignUmpire:
    """Test suite for claiming a match"""

    def test_assign_umpire(self, pending_match, margin_format):
        machine = MatchStateMachine(pending_match, margin_format)

        assert machine.assign_umpire(UMPIRE) is True
        assert pending_match.umpire_id == UMPIRE
        assert pending_match.result == MatchStatus.IN_PROGRESS
        assert len(pending_match.games) == 1
        assert (machine.current_game.team1_score, machine.current_game.team2_score) == (0, 0)

    def test_second_claim_is_refused(self, pending_match, margin_format):
        machine = MatchStateMachine(pending_match, margin_format)
        machine.assign_umpire(UMPIRE)
        before = pending_match.model_dump()

        assert machine.assign_umpire("umpire-2") is False
        assert pending_match.model_dump() == before

    def test_claim_after_completion_is_refused(self, margin_format):
        match = make_match(result=MatchStatus.CANCELLED)
        assert MatchStateMachine(match, margin_format).assign_umpire(UMPIRE) is False
        assert match.umpire_id is None

    def test_claim_on_decided_match_is_refused(self, margin_format):
        match = make_match(result=MatchStatus.TEAM2_WINS, winner_id="team-b")
        before = match.model_dump()

        assert MatchStateMachine(match, margin_format).assign_umpire(UMPIRE) is False
        assert match.model_dump() == before


class TestRecordPoint:
    """Test suite for live point scoring"""

    def test_point_increments_side(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE)
        machine.record_point(Side.TEAM2, UMPIRE)
        machine.record_point("team1", UMPIRE)

        game = machine.current_game
        assert (game.team1_score, game.team2_score) == (2, 1)
        assert len(game.history) == 3

    def test_other_caller_is_rejected(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE)
        before = machine.match.model_dump()

        with pytest.raises(AuthorizationError):
            machine.record_point(Side.TEAM1, "umpire-2")
        assert machine.match.model_dump() == before

    def test_pending_match_is_rejected(self, pending_match, margin_format):
        machine = MatchStateMachine(pending_match, margin_format)
        before = pending_match.model_dump()

        with pytest.raises(PreconditionError):
            machine.record_point(Side.TEAM1, UMPIRE)
        assert pending_match.model_dump() == before

    def test_decided_match_is_rejected(self, exact_format):
        machine = claimed_machine(exact_format)
        play_game(machine, 21, 10)

        with pytest.raises(MatchNotInProgressError):
            machine.record_point(Side.TEAM2, UMPIRE)

    def test_best_of_one_exact(self, exact_format):
        """Team A beating team B 21-10 wins the match for A"""
        machine = claimed_machine(exact_format)
        play_game(machine, 21, 10)

        match = machine.match
        assert match.result == MatchStatus.TEAM1_WINS
        assert match.winner_id == "team-a"
        assert len(match.games) == 1

    def test_game_won_opens_next_game(self, margin_format):
        machine = claimed_machine(margin_format)
        play_game(machine, 21, 15)

        assert machine.match.result == MatchStatus.IN_PROGRESS
        assert len(machine.match.games) == 2
        assert (machine.current_game.team1_score, machine.current_game.team2_score) == (0, 0)

    def test_deuce_then_cap(self, margin_format):
        machine = claimed_machine(margin_format)
        for _ in range(29):
            machine.record_point(Side.TEAM1, UMPIRE)
            machine.record_point(Side.TEAM2, UMPIRE)
        assert len(machine.match.games) == 1

        machine.record_point(Side.TEAM2, UMPIRE)
        assert len(machine.match.games) == 2
        assert machine.match.games[0].team2_score == 30

    def test_best_of_three_decider(self, margin_format):
        machine = claimed_machine(margin_format)
        play_game(machine, 21, 15)
        play_game(machine, 19, 21)
        play_game(machine, 10, 21)

        assert machine.match.result == MatchStatus.TEAM2_WINS
        assert machine.match.winner_id == "team-b"
        assert len(machine.match.games) == 3

    @pytest.mark.parametrize("best_of", [BestOf.ONE, BestOf.THREE, BestOf.FIVE])
    def test_games_never_exceed_best_of(self, best_of):
        fmt = make_format(target=5, max_score=5, best_of=best_of)
        machine = claimed_machine(fmt)

        # Alternate game winners so the match runs the full distance
        side = Side.TEAM1
        while machine.match.result == MatchStatus.IN_PROGRESS:
            games_before = len(machine.match.games)
            while len(machine.match.games) == games_before and machine.match.result == MatchStatus.IN_PROGRESS:
                machine.record_point(side, UMPIRE)
            side = Side.TEAM2 if side is Side.TEAM1 else Side.TEAM1
            assert len(machine.match.games) <= best_of

        assert len(machine.match.games) == best_of


class TestUndoLastPoint:
    """Test suite for undoing the last point"""

    def test_undo_restores_previous_score(self, margin_format):
        machine = claimed_machine(margin_format)
        play_game(machine, 21, 15)
        machine.record_point(Side.TEAM1, UMPIRE)
        machine.record_point(Side.TEAM2, UMPIRE)
        before = machine.match.model_dump()

        machine.record_point(Side.TEAM1, UMPIRE)
        machine.undo_last_point(UMPIRE)

        assert machine.match.model_dump() == before

    def test_undo_deciding_point_reopens_match(self, exact_format):
        machine = claimed_machine(exact_format)
        play_game(machine, 20, 10)
        before = machine.match.model_dump()

        machine.record_point(Side.TEAM1, UMPIRE)
        assert machine.match.result == MatchStatus.TEAM1_WINS

        machine.undo_last_point(UMPIRE)
        assert machine.match.model_dump() == before
        assert machine.match.result == MatchStatus.IN_PROGRESS
        assert machine.match.winner_id is None

    def test_nothing_to_undo_in_fresh_game(self, margin_format):
        machine = claimed_machine(margin_format)
        with pytest.raises(NothingToUndoError):
            machine.undo_last_point(UMPIRE)

    def test_undo_does_not_cross_game_boundary(self, margin_format):
        machine = claimed_machine(margin_format)
        play_game(machine, 21, 15)
        before = machine.match.model_dump()

        with pytest.raises(NothingToUndoError):
            machine.undo_last_point(UMPIRE)
        assert machine.match.model_dump() == before

    def test_undo_by_other_caller(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE)

        with pytest.raises(AuthorizationError):
            machine.undo_last_point("umpire-2")
        assert machine.current_game.team1_score == 1

    def test_undo_on_pending_match(self, pending_match, margin_format):
        with pytest.raises(PreconditionError):
            MatchStateMachine(pending_match, margin_format).undo_last_point(UMPIRE)


class TestUpdateFinalScore:
    """Test suite for the umpire's score override"""

    def test_declared_win_accepted(self, exact_format):
        machine = claimed_machine(exact_format)
        machine.update_final_score(21, 10, MatchStatus.TEAM1_WINS, UMPIRE)

        assert machine.match.result == MatchStatus.TEAM1_WINS
        assert machine.match.winner_id == "team-a"
        assert (machine.current_game.team1_score, machine.current_game.team2_score) == (21, 10)

    def test_declared_win_contradicts_scores(self, exact_format):
        machine = claimed_machine(exact_format)
        before = machine.match.model_dump()

        with pytest.raises(ValidationError):
            machine.update_final_score(21, 10, MatchStatus.TEAM2_WINS, UMPIRE)
        assert machine.match.model_dump() == before

    def test_declared_win_on_tie(self, exact_format):
        machine = claimed_machine(exact_format)
        with pytest.raises(ValidationError):
            machine.update_final_score(15, 15, MatchStatus.TEAM1_WINS, UMPIRE)

    def test_declared_win_needs_enough_games(self, margin_format):
        machine = claimed_machine(margin_format)
        with pytest.raises(ValidationError):
            machine.update_final_score(21, 10, MatchStatus.TEAM1_WINS, UMPIRE)

        play_game(machine, 21, 15)
        machine.update_final_score(21, 17, MatchStatus.TEAM1_WINS, UMPIRE)
        assert machine.match.result == MatchStatus.TEAM1_WINS
        assert len(machine.match.games) == 2

    def test_in_progress_with_finished_game_opens_next(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.update_final_score(21, 15, MatchStatus.IN_PROGRESS, UMPIRE)

        assert machine.match.result == MatchStatus.IN_PROGRESS
        assert len(machine.match.games) == 2
        assert machine.match.games[0].team1_score == 21

    def test_in_progress_with_decided_match(self, exact_format):
        machine = claimed_machine(exact_format)
        before = machine.match.model_dump()

        with pytest.raises(ValidationError):
            machine.update_final_score(21, 10, MatchStatus.IN_PROGRESS, UMPIRE)
        assert machine.match.model_dump() == before

    def test_score_correction_can_be_undone(self, margin_format):
        machine = claimed_machine(margin_format)
        play_game(machine, 3, 4)
        machine.update_final_score(5, 4, MatchStatus.IN_PROGRESS, UMPIRE)

        machine.undo_last_point(UMPIRE)
        assert (machine.current_game.team1_score, machine.current_game.team2_score) == (3, 4)

    @pytest.mark.parametrize("result", [MatchStatus.PENDING, MatchStatus.CANCELLED, MatchStatus.TEAM1_RETIRES])
    def test_non_scoring_result_rejected(self, margin_format, result):
        machine = claimed_machine(margin_format)
        with pytest.raises(ValidationError):
            machine.update_final_score(5, 3, result, UMPIRE)

    def test_negative_score_rejected(self, margin_format):
        machine = claimed_machine(margin_format)
        with pytest.raises(ValidationError):
            machine.update_final_score(-1, 3, MatchStatus.IN_PROGRESS, UMPIRE)

    def test_other_caller_rejected(self, exact_format):
        machine = claimed_machine(exact_format)
        with pytest.raises(AuthorizationError):
            machine.update_final_score(21, 10, MatchStatus.TEAM1_WINS, "umpire-2")
        assert machine.match.result == MatchStatus.IN_PROGRESS

    def test_decided_match_rejected(self, exact_format):
        machine = claimed_machine(exact_format)
        machine.update_final_score(21, 10, MatchStatus.TEAM1_WINS, UMPIRE)
        with pytest.raises(MatchNotInProgressError):
            machine.update_final_score(21, 12, MatchStatus.TEAM1_WINS, UMPIRE)

    @pytest.mark.parametrize("score", [(99, 0), (22, 10), (25, 20)])
    def test_score_beyond_exact_target_rejected(self, exact_format, score):
        """Under EXACT 21/21 no game gets past 21"""
        machine = claimed_machine(exact_format)
        before = machine.match.model_dump()

        with pytest.raises(ValidationError):
            machine.update_final_score(*score, MatchStatus.TEAM1_WINS, UMPIRE)
        assert machine.match.model_dump() == before

    @pytest.mark.parametrize("score", [(45, 3), (31, 29), (25, 3), (23, 20)])
    def test_unreachable_margin_score_rejected(self, margin_format, score):
        """Scores past the cap, or past a point that already ended the game, are refused"""
        machine = claimed_machine(margin_format)
        before = machine.match.model_dump()

        with pytest.raises(ValidationError):
            machine.update_final_score(*score, MatchStatus.IN_PROGRESS, UMPIRE)
        assert machine.match.model_dump() == before

    def test_extended_deuce_score_accepted(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.update_final_score(30, 29, MatchStatus.IN_PROGRESS, UMPIRE)

        assert machine.match.games[0].team1_score == 30
        assert len(machine.match.games) == 2


class TestServeTracking:
    """Test suite for server and receiver bookkeeping"""

    def test_point_records_server_and_receiver(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE, server="alice", receiver="bob")

        game = machine.current_game
        assert (game.server, game.receiver) == ("alice", "bob")
        assert (game.history[-1].server, game.history[-1].receiver) == (None, None)

    def test_server_carries_over(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE, server="alice", receiver="bob")
        machine.record_point(Side.TEAM2, UMPIRE)

        assert (machine.current_game.server, machine.current_game.receiver) == ("alice", "bob")

    def test_undo_restores_previous_server_and_receiver(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE, server="alice", receiver="bob")
        machine.record_point(Side.TEAM1, UMPIRE, server="carol", receiver="dave")
        machine.record_point(Side.TEAM2, UMPIRE, server="dave", receiver="carol")

        machine.undo_last_point(UMPIRE)
        game = machine.current_game
        assert (game.team1_score, game.team2_score) == (2, 0)
        assert (game.server, game.receiver) == ("carol", "dave")

        machine.undo_last_point(UMPIRE)
        assert (game.server, game.receiver) == ("alice", "bob")

    def test_same_player_serving_and_receiving(self, margin_format):
        machine = claimed_machine(margin_format)
        before = machine.match.model_dump()

        with pytest.raises(ValidationError):
            machine.record_point(Side.TEAM1, UMPIRE, server="alice", receiver="alice")
        assert machine.match.model_dump() == before

    def test_score_override_keeps_server_for_undo(self, margin_format):
        machine = claimed_machine(margin_format)
        machine.record_point(Side.TEAM1, UMPIRE, server="alice", receiver="bob")
        machine.update_final_score(5, 3, MatchStatus.IN_PROGRESS, UMPIRE)

        machine.undo_last_point(UMPIRE)
        game = machine.current_game
        assert (game.team1_score, game.team2_score) == (1, 0)
        assert (game.server, game.receiver) == ("alice", "bob")


class TestErrorMessages:
    """Test suite for domain error messages"""

    def test_not_in_progress_without_match_id(self):
        error = MatchNotInProgressError()
        assert error.message == "Match is not in progress"
        assert error.status_code == 409

    def test_not_in_progress_with_match_id(self):
        assert MatchNotInProgressError("m-1").message == "Match m-1 is not in progress"
