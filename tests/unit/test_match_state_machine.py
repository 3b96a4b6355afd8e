"""Tests for the match confirmation state machine (pure functions)."""

from datetime import UTC, datetime

import pytest

from src.bc_common.enums import CancellationAction, GameType, MatchStatus
from src.bc_common.errors import (
    AlreadyConfirmedError,
    InvalidMatchTransitionError,
    InvalidMatchUpdateError,
    InvalidScoreError,
    InvalidTeamsError,
    NotMatchParticipantError,
)
from src.bc_match.domain import state_machine
from src.bc_match.domain.models import Match

SLOT_TIME = datetime(2030, 5, 5, 18, 0, tzinfo=UTC)
NOW = datetime(2030, 5, 5, 20, 0, tzinfo=UTC)


def _singles(score1: int | None = None, score2: int | None = None) -> Match:
    return state_machine.new_match(
        "MCH-1", "club", "alice", ["alice"], ["bob"], "singles", SLOT_TIME, score1, score2, NOW
    )


def _doubles(score1: int | None = None, score2: int | None = None) -> Match:
    return state_machine.new_match(
        "MCH-2",
        "club",
        "alice",
        ["alice", "carol"],
        ["bob", "dave"],
        "doubles",
        SLOT_TIME,
        score1,
        score2,
        NOW,
    )


class TestValidateScores:
    def test_valid(self) -> None:
        assert state_machine.validate_scores(21, 15) == (21, 15)
        assert state_machine.validate_scores(0, 21) == (0, 21)

    def test_equal_scores_invalid(self) -> None:
        with pytest.raises(InvalidScoreError, match="equal"):
            state_machine.validate_scores(10, 10)

    def test_negative_invalid(self) -> None:
        with pytest.raises(InvalidScoreError, match="non-negative"):
            state_machine.validate_scores(-1, 21)

    @pytest.mark.parametrize("bad", [None, 1.5, "21", True])
    def test_non_integer_invalid(self, bad: object) -> None:
        with pytest.raises(InvalidScoreError):
            state_machine.validate_scores(bad, 15)


class TestValidateTeams:
    def test_singles_needs_one_each(self) -> None:
        state_machine.validate_teams("a", ["a"], ["b"], GameType.SINGLES)
        with pytest.raises(InvalidTeamsError, match="1 player"):
            state_machine.validate_teams("a", ["a", "c"], ["b"], GameType.SINGLES)

    def test_doubles_needs_two_each(self) -> None:
        state_machine.validate_teams("a", ["a", "c"], ["b", "d"], GameType.DOUBLES)
        with pytest.raises(InvalidTeamsError, match="2 player"):
            state_machine.validate_teams("a", ["a"], ["b"], GameType.DOUBLES)

    def test_empty_team(self) -> None:
        with pytest.raises(InvalidTeamsError, match="at least one"):
            state_machine.validate_teams("a", ["a"], [], GameType.SINGLES)

    def test_player_on_both_teams(self) -> None:
        with pytest.raises(InvalidTeamsError, match="only once"):
            state_machine.validate_teams("a", ["a", "b"], ["b", "c"], GameType.DOUBLES)

    def test_creator_must_play(self) -> None:
        with pytest.raises(InvalidTeamsError, match="creator"):
            state_machine.validate_teams("z", ["a"], ["b"], GameType.SINGLES)


class TestNewMatch:
    def test_creator_is_auto_confirmed(self) -> None:
        match = _singles()
        assert match.status == MatchStatus.PENDING_CONFIRMATION.value
        assert match.confirmed_by == ["alice"]
        assert match.has_scores is False

    def test_scores_recorded_with_submitter(self) -> None:
        match = _singles(21, 17)
        assert (match.score1, match.score2) == (21, 17)
        assert match.submitted_by == "alice"
        assert match.submitted_at == NOW

    def test_single_score_rejected(self) -> None:
        with pytest.raises(InvalidScoreError):
            _singles(21, None)

    def test_unknown_game_type(self) -> None:
        with pytest.raises(InvalidTeamsError, match="unknown game type"):
            state_machine.new_match(
                "MCH-1", "club", "alice", ["alice"], ["bob"], "triples", SLOT_TIME
            )

    def test_naive_slot_time_becomes_utc(self) -> None:
        match = state_machine.new_match(
            "MCH-1", "club", "alice", ["alice"], ["bob"], "singles", SLOT_TIME.replace(tzinfo=None)
        )
        assert match.slot_time == SLOT_TIME


class TestConfirm:
    def test_opponent_confirm_with_scores_confirms(self) -> None:
        match = _singles(21, 17)
        status = state_machine.confirm(match, "bob", now=NOW)
        assert status is MatchStatus.CONFIRMED
        assert match.confirmed_by == ["alice", "bob"]

    def test_opponent_confirm_without_scores_awaits_scores(self) -> None:
        match = _singles()
        status = state_machine.confirm(match, "bob")
        assert status is MatchStatus.AWAITING_SCORES

    def test_scores_submitted_later_confirm(self) -> None:
        match = _doubles()
        assert state_machine.confirm(match, "bob") is MatchStatus.AWAITING_SCORES

        status = state_machine.confirm(match, "carol", 21, 19, now=NOW)

        assert status is MatchStatus.CONFIRMED
        assert match.submitted_by == "carol"

    def test_opponent_can_submit_scores_while_confirming(self) -> None:
        match = _singles()
        status = state_machine.confirm(match, "bob", 15, 21, now=NOW)
        assert status is MatchStatus.CONFIRMED
        assert (match.score1, match.score2) == (15, 21)
        assert match.submitted_by == "bob"

    def test_teammate_confirmation_is_not_enough(self) -> None:
        match = _doubles(21, 10)
        status = state_machine.confirm(match, "carol")
        assert status is MatchStatus.PENDING_CONFIRMATION
        assert match.unconfirmed_players == ["bob", "dave"]

    def test_double_confirm_raises(self) -> None:
        match = _singles()
        with pytest.raises(AlreadyConfirmedError):
            state_machine.confirm(match, "alice")

    def test_outsider_cannot_confirm(self) -> None:
        match = _singles()
        with pytest.raises(NotMatchParticipantError):
            state_machine.confirm(match, "mallory")

    def test_equal_scores_rejected_without_side_effects(self) -> None:
        match = _singles()
        with pytest.raises(InvalidScoreError):
            state_machine.confirm(match, "bob", 10, 10)
        assert match.confirmed_by == ["alice"]
        assert match.status == MatchStatus.PENDING_CONFIRMATION.value

    def test_confirmed_match_cannot_be_confirmed_again(self) -> None:
        match = _doubles(21, 10)
        state_machine.confirm(match, "bob")
        assert match.status == MatchStatus.CONFIRMED.value
        with pytest.raises(InvalidMatchTransitionError):
            state_machine.confirm(match, "dave")


class TestReject:
    def test_rejects_pending(self) -> None:
        match = _singles()
        state_machine.reject(match, "admin", now=NOW)
        assert match.status == MatchStatus.REJECTED.value
        assert match.rejected_by == "admin"
        assert match.rejected_at == NOW

    @pytest.mark.parametrize(
        "status", [MatchStatus.CONFIRMED, MatchStatus.REJECTED, MatchStatus.CANCELLED]
    )
    def test_terminal_cannot_be_rejected(self, status: MatchStatus) -> None:
        match = _singles()
        match.status = status.value
        with pytest.raises(InvalidMatchTransitionError):
            state_machine.reject(match, "admin")


class TestCancellation:
    def test_request_then_decline_restores_previous_status(self) -> None:
        match = _singles()
        state_machine.confirm(match, "bob")
        state_machine.request_cancellation(match, "bob", now=NOW)
        assert match.status == MatchStatus.REQUESTED_CANCELLATION.value
        assert match.status_before_cancellation == MatchStatus.AWAITING_SCORES.value

        status = state_machine.process_cancellation(match, "admin", CancellationAction.REJECT)

        assert status is MatchStatus.AWAITING_SCORES
        assert match.status_before_cancellation is None
        assert match.cancellation_processed_by == "admin"

    def test_approve_cancels(self) -> None:
        match = _singles(21, 3)
        state_machine.confirm(match, "bob")
        state_machine.request_cancellation(match, "alice")

        status = state_machine.process_cancellation(match, "admin", "approve")

        assert status is MatchStatus.CANCELLED

    def test_legacy_row_without_previous_status(self) -> None:
        match = _singles(21, 3)
        match.status = MatchStatus.REQUESTED_CANCELLATION.value
        status = state_machine.process_cancellation(match, "admin", CancellationAction.REJECT)
        assert status is MatchStatus.CONFIRMED

    def test_outsider_cannot_request(self) -> None:
        with pytest.raises(NotMatchParticipantError):
            state_machine.request_cancellation(_singles(), "mallory")

    def test_request_twice_rejected(self) -> None:
        match = _singles()
        state_machine.request_cancellation(match, "alice")
        with pytest.raises(InvalidMatchTransitionError):
            state_machine.request_cancellation(match, "bob")

    def test_process_without_request_rejected(self) -> None:
        with pytest.raises(InvalidMatchTransitionError):
            state_machine.process_cancellation(_singles(), "admin", CancellationAction.APPROVE)

    def test_rejected_match_cannot_request(self) -> None:
        match = _singles()
        state_machine.reject(match, "admin")
        with pytest.raises(InvalidMatchTransitionError):
            state_machine.request_cancellation(match, "alice")


class TestAdminUpdate:
    def test_changes_whitelisted_fields(self) -> None:
        match = _singles()
        changed = state_machine.admin_update(
            match, {"score1": 21, "score2": 12, "slot_time": "2030-05-06T18:00:00+00:00"}
        )
        assert changed == ["slot_time", "score1", "score2"]
        assert match.slot_time == datetime(2030, 5, 6, 18, 0, tzinfo=UTC)
        assert (match.score1, match.score2) == (21, 12)

    def test_status_change_does_not_touch_confirmations(self) -> None:
        match = _singles()
        changed = state_machine.admin_update(match, {"status": "confirmed"})
        assert changed == ["status"]
        assert match.confirmed_by == ["alice"]

    def test_scores_confirm_match_awaiting_them(self) -> None:
        match = _singles()
        state_machine.confirm(match, "bob")
        changed = state_machine.admin_update(match, {"score1": 21, "score2": 12})
        assert changed == ["score1", "score2", "status"]
        assert match.status == MatchStatus.CONFIRMED.value

    def test_explicit_status_wins_over_scores(self) -> None:
        match = _singles()
        state_machine.confirm(match, "bob")
        state_machine.admin_update(
            match, {"score1": 21, "score2": 12, "status": "pending_confirmation"}
        )
        assert match.status == MatchStatus.PENDING_CONFIRMATION.value

    def test_unchanged_values_are_not_reported(self) -> None:
        match = _singles()
        assert state_machine.admin_update(match, {"game_type": "singles"}) == []

    def test_unknown_field_rejected(self) -> None:
        match = _singles()
        with pytest.raises(InvalidMatchUpdateError, match="confirmed_by"):
            state_machine.admin_update(match, {"confirmed_by": ["bob"], "score1": 21})
        assert match.score1 is None

    def test_empty_patch_rejected(self) -> None:
        with pytest.raises(InvalidMatchUpdateError):
            state_machine.admin_update(_singles(), {})

    def test_game_type_must_fit_teams(self) -> None:
        with pytest.raises(InvalidMatchUpdateError, match="doubles"):
            state_machine.admin_update(_singles(), {"game_type": "doubles"})

    def test_invalid_scores_rejected(self) -> None:
        with pytest.raises(InvalidMatchUpdateError, match="equal"):
            state_machine.admin_update(_singles(), {"score1": 10, "score2": 10})

    def test_bad_values_rejected(self) -> None:
        with pytest.raises(InvalidMatchUpdateError):
            state_machine.admin_update(_singles(), {"slot_time": "yesterday"})
        with pytest.raises(InvalidMatchUpdateError):
            state_machine.admin_update(_singles(), {"status": "finished"})
