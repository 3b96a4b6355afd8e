"""Unified error codes and custom exceptions.

Every error carries an ErrorKind from the public taxonomy so callers can
branch on the category without knowing individual codes.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account / balance
  3xxx: Slot / booking / waitlist
  4xxx: Match
  9xxx: System
"""

from enum import Enum


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission_denied"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    FAILED_PRECONDITION = "failed_precondition"
    ALREADY_EXISTS = "already_exists"
    INTERNAL = "internal"


_DEFAULT_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FAILED_PRECONDITION: 422,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int | None = None,
        kind: ErrorKind = ErrorKind.INTERNAL,
    ) -> None:
        self.code = code
        self.message = message
        self.kind = kind
        self.http_status = http_status if http_status is not None else _DEFAULT_STATUS[kind]
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", kind=ErrorKind.ALREADY_EXISTS)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", kind=ErrorKind.ALREADY_EXISTS)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", kind=ErrorKind.UNAUTHENTICATED)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", kind=ErrorKind.PERMISSION_DENIED)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(
            1005, "Refresh token is invalid or expired", kind=ErrorKind.UNAUTHENTICATED
        )


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin role required", kind=ErrorKind.PERMISSION_DENIED)


# --- 2xxx: Account ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} cents, available {available} cents",
            kind=ErrorKind.FAILED_PRECONDITION,
        )


class MemberNotFoundError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(2002, f"Member profile not found: {member_id}", kind=ErrorKind.NOT_FOUND)


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid amount: {detail}", kind=ErrorKind.INVALID_ARGUMENT)


class NoPendingRegistrationFeeError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(
            2004,
            f"No pending registration fee for member {member_id}",
            kind=ErrorKind.FAILED_PRECONDITION,
        )


# --- 3xxx: Slot / booking ---

class SlotNotFoundError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(3001, f"Slot not found: {slot_id}", kind=ErrorKind.NOT_FOUND)


class SlotAlreadyBookedError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(
            3002, f"Slot is already booked: {slot_id}", kind=ErrorKind.FAILED_PRECONDITION
        )


class SlotNotAvailableError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(
            3003, f"Slot is not available: {slot_id}", kind=ErrorKind.FAILED_PRECONDITION
        )


class DoubleBookingError(AppError):
    def __init__(self, start_time: str) -> None:
        super().__init__(
            3004,
            f"Member already holds a slot at the same start time ({start_time})",
            kind=ErrorKind.FAILED_PRECONDITION,
        )


class NotSlotOwnerError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(
            3005, f"Slot {slot_id} is not booked by the caller", kind=ErrorKind.PERMISSION_DENIED
        )


class SlotNotBookedError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(3006, f"Slot is not booked: {slot_id}", kind=ErrorKind.FAILED_PRECONDITION)


class AlreadyOnWaitlistError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(
            3007, f"Already on the waitlist for slot {slot_id}", kind=ErrorKind.ALREADY_EXISTS
        )


class NotOnWaitlistError(AppError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(3008, f"Not on the waitlist for slot {slot_id}", kind=ErrorKind.NOT_FOUND)


class SettingsNotFoundError(AppError):
    def __init__(self, club_id: str) -> None:
        super().__init__(
            3009, f"App settings not configured for club {club_id}", kind=ErrorKind.NOT_FOUND
        )


class InvalidSlotRequestError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3010, f"Invalid slot request: {detail}", kind=ErrorKind.INVALID_ARGUMENT)


# --- 4xxx: Match ---

class MatchNotFoundError(AppError):
    def __init__(self, match_id: str) -> None:
        super().__init__(4001, f"Match not found: {match_id}", kind=ErrorKind.NOT_FOUND)


class InvalidTeamsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"Invalid teams: {detail}", kind=ErrorKind.INVALID_ARGUMENT)


class InvalidScoreError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4003, f"Invalid score: {detail}", kind=ErrorKind.INVALID_ARGUMENT)


class NotMatchParticipantError(AppError):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            4004, f"Caller is not a player in match {match_id}", kind=ErrorKind.PERMISSION_DENIED
        )


class AlreadyConfirmedError(AppError):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            4005, f"Match {match_id} already confirmed by caller", kind=ErrorKind.ALREADY_EXISTS
        )


class InvalidMatchTransitionError(AppError):
    def __init__(self, match_id: str, status: str, action: str) -> None:
        super().__init__(
            4006,
            f"Match {match_id} in status {status} cannot {action}",
            kind=ErrorKind.FAILED_PRECONDITION,
        )


class InvalidMatchUpdateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4007, f"Invalid match update: {detail}", kind=ErrorKind.INVALID_ARGUMENT)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, kind=ErrorKind.INTERNAL)
