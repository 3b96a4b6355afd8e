from datetime import datetime, timedelta

from src.bc_common.datetime_utils import ensure_utc
from src.bc_common.errors import InvalidSlotRequestError

MAX_RECURRING_WEEKS = 52


def weekly_start_times(first_start: datetime, weeks: int) -> list[datetime]:
    """Start times for `weeks` consecutive weekly occurrences, first included."""
    if not 1 <= weeks <= MAX_RECURRING_WEEKS:
        raise InvalidSlotRequestError(f"weeks must be between 1 and {MAX_RECURRING_WEEKS}")
    first = ensure_utc(first_start)
    return [first + timedelta(weeks=i) for i in range(weeks)]
