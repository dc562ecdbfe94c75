"""Tests for amount parsing."""

import pytest

from scholarship_scraper.core.amount_parser import AmountParser


@pytest.fixture
def parser():
    return AmountParser()


class TestParse:
    """Tests for AmountParser.parse classification."""

    def test_range_with_currency(self, parser):
        """Test that a two-value range yields its maximum."""
        result = parser.parse("$5,000 - $10,000")

        assert result.value == 10000
        assert result.is_range is True
        assert result.is_full_tuition is False
        assert result.original_text == "$5,000 - $10,000"

    def test_up_to(self, parser):
        """Test 'up to' with a single figure."""
        result = parser.parse("Up to €20,000 per year")

        assert result.is_range is True
        assert result.value == 20000

    def test_to_range(self, parser):
        result = parser.parse("5000 to 12000 USD")

        assert result.is_range is True
        assert result.value == 12000

    def test_full_tuition(self, parser):
        """Test that full coverage wins over any figures."""
        result = parser.parse("Full tuition + stipend")

        assert result.is_full_tuition is True
        assert result.value is None

    def test_full_coverage_beats_range(self, parser):
        result = parser.parse("Fully funded, up to $50,000")

        assert result.is_full_tuition is True
        assert result.is_range is False
        assert result.value is None

    @pytest.mark.parametrize("text", ["Varies", "TBD", "Contact the office", "Amount not specified"])
    def test_variable(self, parser, text):
        result = parser.parse(text)

        assert result.is_variable is True
        assert result.value is None

    def test_flat_amount(self, parser):
        result = parser.parse("$2,500 per semester")

        assert result.value == 2500
        assert result.is_range is False

    def test_decimal_amount(self, parser):
        result = parser.parse("£1,250.50 monthly")

        assert result.value == 1250.5

    def test_no_numbers_keeps_text(self, parser):
        """Test text without numbers keeps its original text."""
        result = parser.parse("Generous support")

        assert result.value is None
        assert result.original_text == "Generous support"

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_empty_input(self, parser, value):
        result = parser.parse(value)

        assert result.value is None
        assert result.is_range is False
        assert result.is_full_tuition is False
        assert result.is_variable is False
        assert result.original_text == ""


class TestHelpers:
    """Tests for extraction helpers."""

    def test_extract_max_from_range(self, parser):
        assert parser.extract_max_from_range("Between $3,000 and $7,500") == 7500

    def test_extract_max_no_numbers(self, parser):
        assert parser.extract_max_from_range("up to a lot") is None

    def test_extract_numeric_value_first(self, parser):
        assert parser.extract_numeric_value("¥300,000 then ¥100,000") == 300000

    def test_is_full_coverage(self, parser):
        assert parser.is_full_coverage("Complete funding for 2 years")
        assert not parser.is_full_coverage("Partial funding")
        assert not parser.is_full_coverage(None)
