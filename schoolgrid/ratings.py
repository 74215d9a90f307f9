"""
Session evaluation ratings.

A session is rated in up to six independent slots. The summary rating is the
mean of the slots that were actually filled in:

    [8, None, 6, None, None, None]  ->  7.0

A blank slot never counts as zero. If no slot is filled in the result is
NO_RATING (None), which callers must keep apart from a real average of 0.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


MAX_RATING_SLOTS = 6
RATING_MIN = 0.0
RATING_MAX = 10.0

NO_RATING = None


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def parse_rating(value: Any) -> Optional[float]:
    """
    Convert one form/backend value into a rating.

    Blank values (None, '', '   ') give None.
    Raises ValueError for non-numeric input or values outside RATING_MIN..RATING_MAX.
    """
    if _is_absent(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid rating: {value!r}")
    try:
        score = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid rating: {value!r}") from None
    if not (RATING_MIN <= score <= RATING_MAX):
        raise ValueError(f"Rating out of range {RATING_MIN:g}-{RATING_MAX:g}: {value!r}")
    return score


def average_score(ratings: Sequence[Any]) -> Optional[float]:
    """
    Arithmetic mean of the present ratings, or NO_RATING if none is present.

    No rounding is applied here; see format_average() for display.
    """
    if len(ratings) > MAX_RATING_SLOTS:
        raise ValueError(f"At most {MAX_RATING_SLOTS} rating slots, got {len(ratings)}")

    present = [float(r) for r in ratings if not _is_absent(r)]
    if not present:
        return NO_RATING
    return sum(present) / len(present)


def format_average(avg: Optional[float]) -> str:
    # Presentation boundary: one decimal, '-' when there is no rating
    if avg is NO_RATING:
        return "-"
    return f"{avg:.1f}"
