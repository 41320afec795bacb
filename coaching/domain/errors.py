"""
Caller-correctable engine errors.

Every message is shown verbatim to end users, so each one names the rule
that was violated. ``code`` is the stable machine-readable tag.
"""


class CoachingValidationError(ValueError):
    code = "validation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CoachingValidationError):
    code = "not_found"


class InvalidDateError(CoachingValidationError):
    code = "invalid_date"


class InvalidTransitionError(CoachingValidationError):
    code = "invalid_transition"


class SubscriptionNotActiveError(CoachingValidationError):
    code = "subscription_not_active"

    def __init__(self, message: str, status: str):
        super().__init__(message)
        self.status = status


class OutOfRangeError(CoachingValidationError):
    code = "out_of_range"

    START_BEFORE_SUBSCRIPTION_START = "start_before_subscription_start"
    START_AFTER_SUBSCRIPTION_END = "start_after_subscription_end"
    DUE_AFTER_SUBSCRIPTION_END = "due_after_subscription_end"
    TASK_OUTSIDE_NEW_RANGE = "task_outside_new_range"

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class InvalidOrderError(CoachingValidationError):
    code = "invalid_order"


class IdentityMismatchError(CoachingValidationError):
    code = "identity_mismatch"

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class TaskConflictError(CoachingValidationError):
    code = "conflict"

    def __init__(self, message: str, conflicting_task_id: str):
        super().__init__(message)
        self.conflicting_task_id = conflicting_task_id


class ImmutableFieldError(CoachingValidationError):
    code = "immutable_field"
