"""
Test capacity layout parsing and slot-type capacity calculations.
"""

import pytest

from core.capacity_layout import (
    calculate_capacity_layout,
    format_capacity_layout,
    get_location_size,
    get_slot_dimensions,
    get_slot_volume,
    parse_capacity_layout,
    validate_capacity_layout,
)


class TestParseCapacityLayout:
    """Test parsing of dash-delimited capacity layouts."""

    def test_four_quarters_is_valid(self):
        parsed = parse_capacity_layout("0.25-0.25-0.25-0.25")

        assert parsed.is_valid
        assert parsed.values == (0.25, 0.25, 0.25, 0.25)
        assert parsed.sum == pytest.approx(1.0)
        assert parsed.error is None

    def test_short_sum_is_invalid(self):
        parsed = parse_capacity_layout("0.5-0.4")

        assert not parsed.is_valid
        assert parsed.sum == pytest.approx(0.9)
        assert parsed.error == "Sum is 0.9000, must be 1.0"

    def test_whitespace_around_tokens_is_ignored(self):
        parsed = parse_capacity_layout(" 0.5 - 0.5 ")

        assert parsed.is_valid
        assert parsed.values == (0.5, 0.5)

    def test_single_full_share_is_valid(self):
        assert parse_capacity_layout("1").is_valid

    def test_sum_within_tolerance_is_valid(self):
        assert parse_capacity_layout("0.3333-0.3333-0.3334").is_valid

    def test_sum_over_one_is_invalid(self):
        parsed = parse_capacity_layout("0.6-0.6")

        assert not parsed.is_valid
        assert parsed.sum == pytest.approx(1.2)

    @pytest.mark.parametrize("layout", ["0.5-abc", "0.5--0.5", "", "nan-1", "0.5-0.5x", "0_5-0_5", "0.2_5-0.7_5"])
    def test_non_numeric_tokens_fail_softly(self, layout):
        parsed = parse_capacity_layout(layout)

        assert not parsed.is_valid
        assert parsed.error == "Contains non-numeric values"
        assert parsed.values == ()
        assert parsed.sum == 0.0

    def test_decimal_comma_is_accepted(self):
        parsed = parse_capacity_layout("0,25-0,75")

        assert parsed.is_valid
        assert parsed.values == (0.25, 0.75)

    def test_non_string_input_never_raises(self):
        parsed = parse_capacity_layout(None)

        assert not parsed.is_valid
        assert parsed.error
        assert parsed.values == ()

    def test_raw_string_is_kept(self):
        assert parse_capacity_layout("0.5-0.5").raw == "0.5-0.5"


class TestSlotDimensions:
    """Test the slot-type dimension lookups."""

    def test_known_slot_type(self):
        dims = get_slot_dimensions("BLH")

        assert dims["volume"] == 2_430_000
        assert dims["location_size"] == 1.0

    def test_unknown_slot_type(self):
        assert get_slot_dimensions("XYZ") is None
        assert get_slot_volume("XYZ") == 0
        assert get_location_size("XYZ") == 1.0

    @pytest.mark.parametrize(
        "slot_type,expected",
        [("BLN", 1.0), ("BLL", 0.5), ("PP5", 0.5), ("PP3", 0.25), ("PK", 0.25)],
    )
    def test_location_size_classes(self, slot_type, expected):
        assert get_location_size(slot_type) == expected


class TestCalculateCapacityLayout:
    """Test splitting bay capacity across locations by volume."""

    def test_shares_follow_volume(self):
        shares = calculate_capacity_layout([("L1", "BLH"), ("L2", "BLL")])

        assert shares["L1"] == pytest.approx(0.75)
        assert shares["L2"] == pytest.approx(0.25)

    def test_reserve_locations_weigh_one_unit(self):
        shares = calculate_capacity_layout([("R1", None), ("R2", "")])

        assert shares == {"R1": 0.5, "R2": 0.5}

    def test_zero_volume_gives_equal_shares(self):
        shares = calculate_capacity_layout([("L1", "XYZ"), ("L2", "ABC"), ("L3", "QQQ"), ("L4", "ZZZ")])

        assert shares == {"L1": 0.25, "L2": 0.25, "L3": 0.25, "L4": 0.25}

    def test_empty_bay(self):
        assert calculate_capacity_layout([]) == {}

    def test_shares_sum_to_one(self):
        shares = calculate_capacity_layout([("A", "PP3"), ("B", "PP7"), ("C", "PP9"), ("D", None)])

        assert validate_capacity_layout(list(shares.values()))


class TestFormatCapacityLayout:
    """Test European-decimal layout formatting."""

    def test_format_uses_comma_and_sixteen_decimals(self):
        assert format_capacity_layout([0.5, 0.5]) == "0,5000000000000000-0,5000000000000000"

    def test_formatted_layout_parses_back(self):
        shares = calculate_capacity_layout([("L1", "BLH"), ("L2", "PP3"), ("L3", "PK")])
        formatted = format_capacity_layout(list(shares.values()))

        assert parse_capacity_layout(formatted).is_valid


class TestValidateCapacityLayout:
    """Test share-list validation."""

    def test_within_tolerance(self):
        assert validate_capacity_layout([0.5, 0.4995])

    def test_outside_tolerance(self):
        assert not validate_capacity_layout([0.5, 0.4])

    def test_custom_tolerance(self):
        assert validate_capacity_layout([0.5, 0.4], tolerance=0.2)
