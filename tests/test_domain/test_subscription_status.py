"""
Tests for the subscription transition table and expiration rule
"""
from datetime import date

import pytest

from coaching.domain.errors import CoachingValidationError, InvalidTransitionError
from coaching.domain.subscription import (
    SubscriptionStatus, can_transition, is_expired, next_status,
)

P, A, R, S = (
    SubscriptionStatus.PENDING,
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.REJECTED,
    SubscriptionStatus.STOPPED,
)


class TestTransitions:
    @pytest.mark.parametrize("current,target", [(P, A), (P, R), (A, S), (S, A)])
    def test_legal_edges(self, current, target):
        assert can_transition(current, target)
        assert next_status(current, target) == target

    @pytest.mark.parametrize("current,target", [(P, S), (A, P), (A, R), (S, P), (S, R)])
    def test_illegal_edges(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(InvalidTransitionError, match="Allowed"):
            next_status(current, target)

    @pytest.mark.parametrize("target", [P, A, S, R])
    def test_rejected_is_terminal(self, target):
        with pytest.raises(InvalidTransitionError, match="rejected"):
            next_status(R, target)

    @pytest.mark.parametrize("status", [P, A, S])
    def test_self_transition_is_illegal(self, status):
        with pytest.raises(InvalidTransitionError, match="already"):
            next_status(status, status)


class TestParse:
    def test_parse_is_case_insensitive(self):
        assert SubscriptionStatus.parse(" Active ") == A

    def test_parse_passes_enum_through(self):
        assert SubscriptionStatus.parse(S) is S

    def test_unknown_status(self):
        with pytest.raises(CoachingValidationError) as exc:
            SubscriptionStatus.parse("paused")
        assert not isinstance(exc.value, InvalidTransitionError)
        assert "pending, active, rejected, stopped" in exc.value.message


class TestExpiration:
    def test_end_date_is_inclusive(self):
        assert not is_expired(date(2024, 1, 31), date(2024, 1, 31))

    def test_expired_the_day_after(self):
        assert is_expired(date(2024, 1, 31), date(2024, 2, 1))
