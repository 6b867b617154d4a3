"""Unit tests for import parsing utilities."""

from datetime import date
from decimal import Decimal

import pytest

from rentledger.services.errors import InvalidInput, InvalidPeriod
from rentledger.services.parsers import parse_billing_month, parse_decimal, read_usage_csv


class TestParseDecimal:
    """Test number cell parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("4", Decimal("4")),
            ("6.5", Decimal("6.5")),
            ("1,339.50", Decimal("1339.50")),
            ("1 339.50", Decimal("1339.50")),
            ("1\xa0000", Decimal("1000")),
            (206, Decimal("206")),
            (6.5, Decimal("6.5")),
        ],
    )
    def test_parses_numbers(self, value, expected):
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_is_none(self, value):
        assert parse_decimal(value) is None

    def test_garbage_raises_invalid_input(self):
        with pytest.raises(InvalidInput, match="water_usage"):
            parse_decimal("lots", "water_usage")

    def test_negative_is_parsed_not_rejected(self):
        """Sign checks belong to the caller."""
        assert parse_decimal("-3") == Decimal("-3")


class TestParseBillingMonth:
    """Test YYYY-MM parsing."""

    def test_valid_month(self):
        assert parse_billing_month("2024-03") == date(2024, 3, 1)
        assert parse_billing_month(" 2024-12 ") == date(2024, 12, 1)

    @pytest.mark.parametrize("value", [None, "", "2024-13", "2024-00", "2024/03", "03-2024", "2024-3"])
    def test_invalid_month(self, value):
        with pytest.raises(InvalidPeriod):
            parse_billing_month(value)


class TestReadUsageCsv:
    """Test CSV row mapping."""

    def test_maps_header_to_row_keys(self):
        text = (
            "RoomNumber,WaterUsage,ElectricityUsage,BillingMonth,WaterRate,ElectricityRate\n"
            "A101,4,206,2024-03,30,6.5\n"
            "B202,2,150,2024-03,,\n"
        )

        rows = read_usage_csv(text)

        assert rows == [
            {
                "room_number": "A101",
                "water_usage": "4",
                "electricity_usage": "206",
                "billing_month": "2024-03",
                "water_rate": "30",
                "electricity_rate": "6.5",
            },
            {
                "room_number": "B202",
                "water_usage": "2",
                "electricity_usage": "150",
                "billing_month": "2024-03",
                "water_rate": "",
                "electricity_rate": "",
            },
        ]

    def test_rate_columns_optional(self):
        rows = read_usage_csv(
            "RoomNumber,WaterUsage,ElectricityUsage,BillingMonth\nA101,4,206,2024-03\n"
        )
        assert rows == [
            {
                "room_number": "A101",
                "water_usage": "4",
                "electricity_usage": "206",
                "billing_month": "2024-03",
            }
        ]

    def test_byte_order_mark_and_blank_lines(self):
        text = "\ufeffRoomNumber,WaterUsage,ElectricityUsage,BillingMonth\n\nA101,4,206,2024-03\n\n"
        assert len(read_usage_csv(text)) == 1

    def test_row_of_empty_cells_is_kept(self):
        text = "RoomNumber,WaterUsage,ElectricityUsage,BillingMonth\n,,,\nA101,4,206,2024-03\n"
        rows = read_usage_csv(text)

        assert len(rows) == 2
        assert rows[0] == {
            "room_number": "",
            "water_usage": "",
            "electricity_usage": "",
            "billing_month": "",
        }
        assert rows[1]["room_number"] == "A101"

    def test_missing_required_column(self):
        with pytest.raises(InvalidInput, match="BillingMonth"):
            read_usage_csv("RoomNumber,WaterUsage,ElectricityUsage\nA101,4,206\n")
