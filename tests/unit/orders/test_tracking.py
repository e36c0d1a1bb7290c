"""Tests for tracking code generation and validation."""

from __future__ import annotations

import pytest
from django.db import transaction

from modules.orders.exceptions import InvalidTrackingCode, TrackingCodeConflict
from modules.orders.models import TrackingSequence
from modules.orders.tracking import (
    clean_tracking_code,
    format_tracking_code,
    next_tracking_code,
    normalize_tracking_code,
    short_code,
    validate_tracking_code,
)

pytestmark = pytest.mark.unit


class TestFormatAndValidate:
    def test_format(self):
        assert format_tracking_code(1) == "ZAM000001"
        assert format_tracking_code(123456) == "ZAM123456"
        assert format_tracking_code(7, prefix="tst") == "TST000007"

    @pytest.mark.parametrize(
        "raw, expected",
        [("zam000001", "ZAM000001"), (" ZAM-000 001 ", "ZAM000001"), (None, "")],
    )
    def test_normalize(self, raw, expected):
        assert normalize_tracking_code(raw) == expected

    @pytest.mark.parametrize("code", ["ZAM000001", "zam-123456"])
    def test_valid(self, code):
        assert validate_tracking_code(code)

    @pytest.mark.parametrize("code", ["ZAM00001", "ZAM0000001", "ABC000001", "ZAMABCDEF", "", None])
    def test_invalid(self, code):
        assert not validate_tracking_code(code)

    def test_clean_raises_with_example(self):
        with pytest.raises(InvalidTrackingCode, match="ZAM000001"):
            clean_tracking_code("ZAM12")

    def test_short_code(self):
        assert short_code("ZAM000123") == "0123"


class TestNextTrackingCode:
    def test_sequential_codes(self):
        with transaction.atomic():
            codes = [next_tracking_code() for _ in range(3)]

        assert codes == ["ZAM000001", "ZAM000002", "ZAM000003"]
        assert TrackingSequence.objects.get(prefix="ZAM").last_value == 3

    def test_prefixes_have_separate_sequences(self):
        with transaction.atomic():
            assert next_tracking_code() == "ZAM000001"
            assert next_tracking_code(prefix="TST") == "TST000001"

    def test_seeds_from_existing_orders(self, material, make_order):
        make_order(material, quantity="1")
        make_order(material, quantity="1")
        TrackingSequence.objects.all().delete()

        with transaction.atomic():
            assert next_tracking_code() == "ZAM000003"

    def test_exhausted_prefix(self):
        TrackingSequence.objects.create(prefix="ZAM", last_value=999_999)

        with pytest.raises(TrackingCodeConflict, match="exhausted"):
            with transaction.atomic():
                next_tracking_code()
