"""
Tests for task creation/update validation (subscription gate, containment,
ordering, identity, conflicts)
"""
from datetime import date, datetime

import pytest

from coaching.application.tasks import (
    CreateTaskUseCase, GetTaskUseCase, ListTasksUseCase, UpdateTaskUseCase,
)
from coaching.domain.errors import (
    CoachingValidationError, IdentityMismatchError, ImmutableFieldError,
    InvalidDateError, InvalidOrderError, NotFoundError, OutOfRangeError,
    SubscriptionNotActiveError, TaskConflictError,
)
from coaching.domain.subscription import SubscriptionStatus
from coaching.domain.task import TaskStatus
from coaching.infrastructure.db.models import TaskModel

COACH = "coach-1"
PLAYER = "player-1"


def create(db_session, clock, sub, start, due, title="Footwork", **kwargs):
    params = dict(coach_id=COACH, player_id=PLAYER, subscription_id=sub.id)
    params.update(kwargs)
    return CreateTaskUseCase(db_session, clock).execute(
        title=title, start_date=start, due_date=due, **params,
    )


class TestCreateTask:
    def test_inside_active_subscription(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")

        assert task.id
        assert task.status == TaskStatus.PENDING
        assert task.start_date == datetime(2024, 1, 5, 9)
        assert task.due_date == datetime(2024, 1, 5, 10)
        assert db_session.query(TaskModel).count() == 1

    def test_after_subscription_end(self, db_session, clock, active_subscription):
        with pytest.raises(OutOfRangeError) as exc:
            create(db_session, clock, active_subscription, "2024-02-01T09:00", "2024-02-01T10:00")
        assert exc.value.reason == OutOfRangeError.START_AFTER_SUBSCRIPTION_END
        assert db_session.query(TaskModel).count() == 0

    def test_overlapping_task(self, db_session, clock, active_subscription):
        first = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")

        with pytest.raises(TaskConflictError) as exc:
            create(db_session, clock, active_subscription, "2024-01-05T09:30", "2024-01-05T10:30", title="Serve")
        assert exc.value.conflicting_task_id == first.id
        assert "overlapping dates" in exc.value.message
        assert db_session.query(TaskModel).count() == 1

    @pytest.mark.parametrize("status", [
        SubscriptionStatus.PENDING, SubscriptionStatus.STOPPED, SubscriptionStatus.REJECTED,
    ])
    def test_inactive_subscription(self, db_session, clock, subscription_factory, status):
        sub = subscription_factory(status=status)
        with pytest.raises(SubscriptionNotActiveError) as exc:
            create(db_session, clock, sub, "2024-01-05T09:00", "2024-01-05T10:00")
        assert exc.value.status == status.value
        assert f"for a {status.value} subscription" in exc.value.message

    def test_unknown_subscription(self, db_session, clock, people):
        with pytest.raises(NotFoundError):
            CreateTaskUseCase(db_session, clock).execute(
                coach_id=COACH, player_id=PLAYER, subscription_id="missing",
                title="x", start_date="2024-01-05", due_date="2024-01-06",
            )

    def test_due_on_last_day_of_subscription(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-31T08:00", "2024-01-31T20:00")
        assert task.due_date == datetime(2024, 1, 31, 20)

    def test_due_after_subscription_end(self, db_session, clock, active_subscription):
        with pytest.raises(OutOfRangeError) as exc:
            create(db_session, clock, active_subscription, "2024-01-30T08:00", "2024-02-02T08:00")
        assert exc.value.reason == OutOfRangeError.DUE_AFTER_SUBSCRIPTION_END

    def test_due_at_midnight_after_subscription_end(self, db_session, clock, active_subscription):
        with pytest.raises(OutOfRangeError) as exc:
            create(db_session, clock, active_subscription, "2024-01-31T09:00", "2024-02-01")
        assert exc.value.reason == OutOfRangeError.DUE_AFTER_SUBSCRIPTION_END
        assert db_session.query(TaskModel).count() == 0

    def test_due_just_before_midnight_of_last_day(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-31T09:00", "2024-01-31T23:59:59")
        assert task.due_date.date() <= active_subscription.end_date

    def test_start_before_subscription(self, db_session, clock, subscription_factory):
        sub = subscription_factory(start=date(2024, 1, 10))
        with pytest.raises(OutOfRangeError) as exc:
            create(db_session, clock, sub, "2024-01-09T23:00", "2024-01-10T10:00")
        assert exc.value.reason == OutOfRangeError.START_BEFORE_SUBSCRIPTION_START

    def test_start_not_before_due(self, db_session, clock, active_subscription):
        with pytest.raises(InvalidOrderError):
            create(db_session, clock, active_subscription, "2024-01-05T10:00", "2024-01-05T10:00")

    def test_bad_date(self, db_session, clock, active_subscription):
        with pytest.raises(InvalidDateError):
            create(db_session, clock, active_subscription, "next week", "2024-01-05T10:00")

    def test_player_mismatch(self, db_session, clock, active_subscription):
        with pytest.raises(IdentityMismatchError) as exc:
            create(db_session, clock, active_subscription, "2024-01-05", "2024-01-06", player_id="player-2")
        assert exc.value.field == "player_id"
        assert exc.value.message == "Player ID does not match the subscription"

    def test_coach_mismatch(self, db_session, clock, active_subscription):
        with pytest.raises(IdentityMismatchError) as exc:
            create(db_session, clock, active_subscription, "2024-01-05", "2024-01-06", coach_id="coach-2")
        assert exc.value.field == "coach_id"

    def test_submission_is_stored(self, db_session, clock, active_subscription):
        task = create(
            db_session, clock, active_subscription, "2024-01-05", "2024-01-06",
            submission={"status": "submitted", "text_response": "Done", "media_urls": ["a.mp4"]},
        )
        assert task.submission["status"] == "submitted"
        assert task.submission["media_urls"] == ["a.mp4"]

    def test_submission_stored_as_given(self, db_session, clock, active_subscription):
        submission = {"text_response": "Done", "reviewed_by": None}
        task = create(db_session, clock, active_subscription, "2024-01-05", "2024-01-06", submission=submission)
        db_session.expire_all()
        assert db_session.get(TaskModel, task.id).submission == {"text_response": "Done", "reviewed_by": None}

    def test_title_required(self, db_session, clock, active_subscription):
        with pytest.raises(CoachingValidationError, match="title is required"):
            create(db_session, clock, active_subscription, "2024-01-05", "2024-01-06", title="  ")

    def test_bad_task_status(self, db_session, clock, active_subscription):
        with pytest.raises(CoachingValidationError, match="Unknown task status"):
            create(db_session, clock, active_subscription, "2024-01-05", "2024-01-06", status="archived")


class TestConflicts:
    def test_touching_endpoints_conflict(self, db_session, clock, active_subscription):
        create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        with pytest.raises(TaskConflictError):
            create(db_session, clock, active_subscription, "2024-01-05T10:00", "2024-01-05T11:00")

    def test_disjoint_tasks_both_succeed(self, db_session, clock, active_subscription):
        create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        create(db_session, clock, active_subscription, "2024-01-05T10:01", "2024-01-05T11:00")
        assert db_session.query(TaskModel).count() == 2

    def test_order_of_creation_does_not_matter(self, db_session, clock, active_subscription):
        create(db_session, clock, active_subscription, "2024-01-05T09:30", "2024-01-05T10:30")
        with pytest.raises(TaskConflictError):
            create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")

    def test_other_player_is_independent(self, db_session, clock, active_subscription, subscription_factory):
        other = subscription_factory(player_id="player-2")
        create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        task = create(db_session, clock, other, "2024-01-05T09:00", "2024-01-05T10:00", player_id="player-2")
        assert task.id

    def test_other_coach_is_independent(self, db_session, clock, active_subscription, subscription_factory):
        other = subscription_factory(coach_id="coach-2")
        create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        task = create(db_session, clock, other, "2024-01-05T09:00", "2024-01-05T10:00", coach_id="coach-2")
        assert task.id

    def test_counts_tasks_of_other_subscriptions(self, db_session, clock, subscription_factory):
        first = subscription_factory(end=date(2024, 1, 15))
        second = subscription_factory(start=date(2024, 1, 10), end=date(2024, 1, 31))
        create(db_session, clock, first, "2024-01-12T09:00", "2024-01-12T10:00")
        with pytest.raises(TaskConflictError):
            create(db_session, clock, second, "2024-01-12T09:30", "2024-01-12T11:00")

    def test_completed_tasks_still_conflict(self, db_session, clock, active_subscription):
        create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00", status="completed")
        with pytest.raises(TaskConflictError):
            create(db_session, clock, active_subscription, "2024-01-05T09:30", "2024-01-05T09:45")


class TestUpdateTask:
    def test_move_into_free_slot(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        updated = UpdateTaskUseCase(db_session, clock).execute(
            task.id, start_date="2024-01-06T09:00", due_date="2024-01-06T10:00",
        )
        assert updated.start_date == datetime(2024, 1, 6, 9)

    def test_update_does_not_conflict_with_itself(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        updated = UpdateTaskUseCase(db_session, clock).execute(task.id, due_date="2024-01-05T11:00")
        assert updated.due_date == datetime(2024, 1, 5, 11)

    def test_move_onto_other_task(self, db_session, clock, active_subscription):
        create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        task = create(db_session, clock, active_subscription, "2024-01-07T09:00", "2024-01-07T10:00")
        with pytest.raises(TaskConflictError):
            UpdateTaskUseCase(db_session, clock).execute(
                task.id, start_date="2024-01-05T09:30", due_date="2024-01-05T11:00",
            )
        db_session.refresh(task)
        assert task.start_date == datetime(2024, 1, 7, 9)

    def test_move_outside_subscription(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        with pytest.raises(OutOfRangeError):
            UpdateTaskUseCase(db_session, clock).execute(task.id, due_date="2024-02-10")

    def test_title_and_status_on_stopped_subscription(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        active_subscription.status = SubscriptionStatus.STOPPED
        db_session.commit()

        updated = UpdateTaskUseCase(db_session, clock).execute(task.id, title="Renamed", status="completed")
        assert updated.title == "Renamed"
        assert updated.status == TaskStatus.COMPLETED

    def test_clear_description(self, db_session, clock, active_subscription):
        task = create(
            db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00",
            description="Bring cones",
        )
        updated = UpdateTaskUseCase(db_session, clock).execute(task.id, description="")
        assert updated.description == ""
        assert updated.title == "Footwork"

    @pytest.mark.parametrize("field", ["subscription_id", "coach_id", "player_id"])
    def test_foreign_references_are_immutable(self, db_session, clock, active_subscription, field):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        with pytest.raises(ImmutableFieldError):
            UpdateTaskUseCase(db_session, clock).execute(task.id, **{field: "other"})

    def test_missing_task(self, db_session, clock, people):
        with pytest.raises(NotFoundError):
            UpdateTaskUseCase(db_session, clock).execute("missing", title="x")


class TestTaskReadModels:
    def test_enriched_with_names(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        row = GetTaskUseCase(db_session, clock).execute(task.id)
        assert row["player_name"] == "Lee Player"
        assert row["coach_name"] == "Anna Coach"
        assert row["is_overdue"] is False

    def test_overdue(self, db_session, clock, active_subscription):
        task = create(db_session, clock, active_subscription, "2024-01-05T09:00", "2024-01-05T10:00")
        clock.advance_to(datetime(2024, 1, 6, 12))
        assert GetTaskUseCase(db_session, clock).execute(task.id)["is_overdue"] is True

    def test_list_ordered_and_filtered(self, db_session, clock, active_subscription):
        create(db_session, clock, active_subscription, "2024-01-20", "2024-01-21", title="Later")
        create(db_session, clock, active_subscription, "2024-01-05", "2024-01-06", title="Sooner", status="completed")

        rows = ListTasksUseCase(db_session, clock).execute(coach_id=COACH)
        assert [r["title"] for r in rows] == ["Sooner", "Later"]
        assert [r["title"] for r in ListTasksUseCase(db_session, clock).execute(status="pending")] == ["Later"]
