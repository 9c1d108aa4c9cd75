"""
Custom exceptions for the progression engine.
Each exception carries a stable error code and the HTTP status it maps to.
"""


class ProgressionException(Exception):
    """Base exception for the progression engine"""
    code = "progression_error"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ProgressionException):
    """Raised when input data is malformed"""
    code = "validation_error"
    status_code = 400

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")


class UnauthorizedError(ProgressionException):
    """Raised when no authenticated user is attached to the request"""
    code = "unauthorized"
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(ProgressionException):
    """Raised when a user touches a resource they do not own"""
    code = "forbidden"
    status_code = 403

    def __init__(self, resource: str, resource_id: int):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"Not allowed to access {resource} {resource_id}")


class NotFoundError(ProgressionException):
    """Raised when a habit, challenge, achievement or user is missing"""
    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} with ID {resource_id} not found")


class ConflictError(ProgressionException):
    """Raised when a write loses against a concurrent or earlier write"""
    code = "conflict"
    status_code = 409


class AlreadyCompletedError(ConflictError):
    """Raised when a habit already has a completion for the day"""
    code = "already_completed"

    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} already completed today")


class AlreadyClaimedError(ConflictError):
    """Raised when a challenge reward was already paid out"""
    code = "already_claimed"

    def __init__(self, challenge_id: int):
        self.challenge_id = challenge_id
        super().__init__(f"Challenge {challenge_id} reward already claimed")


class AlreadyFrozenTodayError(ConflictError):
    """Raised when a freeze was already used on this habit today"""
    code = "already_frozen_today"

    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Already used a freeze on habit {habit_id} today")


class InsufficientBalanceError(ProgressionException):
    """Raised when the spendable balance does not cover a purchase"""
    code = "insufficient_balance"
    status_code = 400

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(f"Insufficient points. Need {required} points, you have {available}")


class CapReachedError(ProgressionException):
    """Raised when a capped counter is already at its limit"""
    code = "cap_reached"
    status_code = 400


class FreezeCapReachedError(CapReachedError):
    """Raised when buying a second freeze while one is banked"""
    code = "freeze_cap_reached"

    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(
            f"Habit {habit_id} already has a Streak Freeze. Use it before buying another"
        )


class NoFreezeAvailableError(ProgressionException):
    """Raised when using a freeze on a habit with none banked"""
    code = "no_freeze_available"
    status_code = 400

    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"No Streak Freezes available for habit {habit_id}")


class NotCompletedError(ProgressionException):
    """Raised when claiming a challenge that has not reached its target"""
    code = "not_completed"
    status_code = 400

    def __init__(self, challenge_id: int):
        self.challenge_id = challenge_id
        super().__init__(f"Challenge {challenge_id} not completed yet")


class ExternalServiceError(ProgressionException):
    """Raised by collaborators (notification dispatch). Never surfaces from primary operations"""
    code = "external_service_error"
    status_code = 502

    def __init__(self, service: str, details: str):
        self.service = service
        self.details = details
        super().__init__(f"{service} failed: {details}")


class StreakBrokenError(ProgressionException):
    """Raised when a freeze is used after the streak has already lapsed"""
    code = "streak_broken"
    status_code = 400

    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Streak on habit {habit_id} is already broken. A freeze can only cover one missed day")
