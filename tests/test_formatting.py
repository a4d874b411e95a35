"""Tests for money and text formatting helpers."""

from money_trail.formatting import format_currency, format_large_number, format_usd, truncate_text


class TestFormatCurrency:
    """Tests for compact currency formatting."""

    def test_millions(self):
        """Test millions keep one decimal."""
        assert format_currency(1_500_000) == "$1.5M"
        assert format_currency(1_000_000) == "$1.0M"

    def test_billions(self):
        """Test billions keep one decimal."""
        assert format_currency(2_340_000_000) == "$2.3B"

    def test_thousands_round_half_up(self):
        """Test thousands are rounded to whole numbers, halves up."""
        assert format_currency(2500) == "$3K"
        assert format_currency(45_200) == "$45K"

    def test_small_amounts(self):
        """Test amounts under a thousand."""
        assert format_currency(900) == "$900"
        assert format_currency(0) == "$0"

    def test_negative(self):
        """Test the sign is kept in front of the dollar sign."""
        assert format_currency(-1_500_000) == "-$1.5M"


class TestFormatUsd:
    """Tests for full dollar formatting."""

    def test_thousands_separators(self):
        """Test grouping with commas."""
        assert format_usd(1234567) == "$1,234,567"

    def test_rounds_cents(self):
        """Test cents are rounded away."""
        assert format_usd(999.5) == "$1,000"


class TestFormatLargeNumber:
    """Tests for large number formatting."""

    def test_thousands_keep_decimal(self):
        """Test thousands keep one decimal place."""
        assert format_large_number(2500) == "$2.5K"

    def test_small_values(self):
        """Test small values fall through to full formatting."""
        assert format_large_number(750) == "$750"


class TestTruncateText:
    """Tests for label truncation."""

    def test_short_text_unchanged(self):
        """Test text within the limit is returned as is."""
        assert truncate_text("Breitbart", 20) == "Breitbart"

    def test_long_text_truncated(self):
        """Test long text is cut and marked."""
        assert truncate_text("Americans for Prosperity", 9) == "Americans..."
