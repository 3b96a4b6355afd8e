"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class MemberRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class LedgerEntryType(str, Enum):
    # Booking engine
    BOOKING = "booking"
    CANCELLATION_REFUND = "cancellation_refund"
    CANCELLATION_NO_REFUND = "cancellation_no_refund"
    # Registration fee: charged by an admin / deducted from the first top-up
    REGISTRATION_FEE = "registration_fee"
    REGISTRATION_FEE_DEDUCTED = "registration_fee_deducted"
    # Credits
    TOP_UP = "top_up"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class MatchStatus(str, Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    AWAITING_SCORES = "awaiting_scores"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    REQUESTED_CANCELLATION = "requested_cancellation"
    CANCELLED = "cancelled"


class GameType(str, Enum):
    """Team size is derived from the game type."""
    SINGLES = "singles"
    DOUBLES = "doubles"

    @property
    def team_size(self) -> int:
        return 1 if self is GameType.SINGLES else 2


class MatchOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class CancellationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class NotificationType(str, Enum):
    SLOT_BOOKED = "slot_booked"
    WAITLIST_JOINED = "waitlist_joined"
    SLOT_AVAILABLE = "slot_available"
    SLOT_CANCELLED = "slot_cancelled"
    MATCH_PENDING_CONFIRMATION = "match_pending_confirmation"
    MATCH_AWAITING_SCORES = "match_awaiting_scores"
    MATCH_CONFIRMED = "match_confirmed"
    MATCH_REJECTED = "match_rejected"
    MATCH_CANCELLATION_REQUESTED = "match_cancellation_requested"
    MATCH_CANCELLED = "match_cancelled"
    MATCH_CANCELLATION_DECLINED = "match_cancellation_declined"
    BALANCE_TOPPED_UP = "balance_topped_up"
