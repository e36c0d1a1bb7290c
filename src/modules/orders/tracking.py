"""Tracking code generation and validation.

Codes are sequential: ``<PREFIX><6 digits>`` (``ZAM000001``).  One
``TrackingSequence`` row per prefix is locked with ``SELECT ... FOR UPDATE``
and incremented with an ``F()`` expression inside the caller's
transaction, so concurrent creations serialise on that row and a rolled
back creation gives its number back.

The first allocation for a prefix seeds the counter from the highest
existing code, which keeps codes issued before the sequence row existed
(e.g. imported orders) from being reissued.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog
from django.conf import settings
from django.db.models import F

from modules.orders.constants import TRACKING_CODE_DIGITS
from modules.orders.exceptions import InvalidTrackingCode, TrackingCodeConflict
from modules.orders.models import Order, TrackingSequence

logger = structlog.get_logger(__name__)

_SEPARATORS = re.compile(r"[\s-]+")


def _prefix(prefix: Optional[str] = None) -> str:
    return (prefix or settings.TRACKING_CODE_PREFIX).upper()


def tracking_code_pattern(prefix: Optional[str] = None) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(_prefix(prefix))}\d{{{TRACKING_CODE_DIGITS}}}$")


def format_tracking_code(value: int, prefix: Optional[str] = None) -> str:
    return f"{_prefix(prefix)}{value:0{TRACKING_CODE_DIGITS}d}"


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def next_tracking_code(prefix: Optional[str] = None) -> str:
    """Allocate the next code for ``prefix``.

    Must run inside ``transaction.atomic``; the sequence row stays locked
    until the caller's transaction ends.

    Raises:
        TrackingCodeConflict: the 6-digit space for the prefix is used up.
    """
    prefix = _prefix(prefix)
    sequence, created = TrackingSequence.objects.select_for_update().get_or_create(
        prefix=prefix,
        defaults={"last_value": _highest_issued(prefix)},
    )
    if created:
        logger.info(
            "tracking.sequence_created", prefix=prefix, seeded_from=sequence.last_value
        )

    TrackingSequence.objects.filter(pk=sequence.pk).update(
        last_value=F("last_value") + 1
    )
    sequence.refresh_from_db(fields=["last_value"])

    if sequence.last_value >= 10**TRACKING_CODE_DIGITS:
        raise TrackingCodeConflict(
            f"Tracking codes for prefix {prefix} are exhausted."
        )
    return format_tracking_code(sequence.last_value, prefix)


def _highest_issued(prefix: str) -> int:
    pattern = tracking_code_pattern(prefix)
    codes = (
        Order.objects.filter(tracking_code__startswith=prefix)
        .order_by("-tracking_code")
        .values_list("tracking_code", flat=True)
    )
    for code in codes:
        if pattern.match(code):
            return int(code[len(prefix) :])
    return 0


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def normalize_tracking_code(code: Optional[str]) -> str:
    """Drop whitespace and dashes, uppercase: ``" zam-000 001"`` -> ``"ZAM000001"``."""
    return _SEPARATORS.sub("", code or "").upper()


def validate_tracking_code(code: Optional[str], prefix: Optional[str] = None) -> bool:
    return bool(tracking_code_pattern(prefix).match(normalize_tracking_code(code)))


def clean_tracking_code(code: Optional[str], prefix: Optional[str] = None) -> str:
    """Return the normalised code or raise ``InvalidTrackingCode``."""
    normalized = normalize_tracking_code(code)
    if not tracking_code_pattern(prefix).match(normalized):
        example = format_tracking_code(1, prefix)
        raise InvalidTrackingCode(
            f"Invalid code format (must be {example}).",
            details={"code": code},
        )
    return normalized


def short_code(code: str) -> str:
    """Last four digits, for compact display on the dashboard."""
    return normalize_tracking_code(code)[-4:]
