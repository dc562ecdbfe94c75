"""
Funding amount parsing.

Handles:
- Full coverage phrases ("Full tuition + stipend")
- Variable/unspecified amounts ("Varies", "TBD")
- Ranges ("$5,000 - $10,000", "up to €20,000")
- Flat amounts ("$2,500 per year")
"""

import re
from typing import Optional

from .models import ParsedAmount


FULL_COVERAGE_KEYWORDS = [
    "full tuition",
    "full coverage",
    "full funding",
    "fully funded",
    "complete funding",
    "total coverage",
]

VARIABLE_KEYWORDS = [
    "varies",
    "variable",
    "tbd",
    "to be determined",
    "not specified",
    "contact",
    "inquire",
]

RANGE_PATTERNS = [
    re.compile(r"\d[\d,]*\s*-\s*[$£€¥₹]?\d"),  # "5,000 - $10,000"
    re.compile(r"\d\s+to\s+\d", re.IGNORECASE),  # "5000 to 10000"
    re.compile(r"up\s+to", re.IGNORECASE),  # "up to $20,000"
    re.compile(r"between\s+", re.IGNORECASE),  # "between 5k and 10k"
]

CURRENCY_SYMBOLS = re.compile(r"[$£€¥₹]")
NUMBER_PATTERN = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?")


class AmountParser:
    """
    Parser turning free-text amounts into ParsedAmount values.

    Classification is done in priority order: full coverage, variable,
    range, flat amount.
    """

    def __init__(
        self,
        full_coverage_keywords: Optional[list[str]] = None,
        variable_keywords: Optional[list[str]] = None,
    ):
        self.full_coverage_keywords = full_coverage_keywords or list(FULL_COVERAGE_KEYWORDS)
        self.variable_keywords = variable_keywords or list(VARIABLE_KEYWORDS)

    def parse(self, text: Optional[str]) -> ParsedAmount:
        """
        Parse an amount description.

        Args:
            text: Raw amount text (may be None)

        Returns:
            ParsedAmount; never raises
        """
        if not text or not isinstance(text, str):
            return ParsedAmount()

        normalized = text.lower().strip()

        if self.is_full_coverage(normalized):
            return ParsedAmount(is_full_tuition=True, original_text=text)

        if any(keyword in normalized for keyword in self.variable_keywords):
            return ParsedAmount(is_variable=True, original_text=text)

        if self.is_range_format(text):
            return ParsedAmount(
                value=self.extract_max_from_range(text),
                is_range=True,
                original_text=text,
            )

        return ParsedAmount(value=self.extract_numeric_value(text), original_text=text)

    def is_full_coverage(self, text: Optional[str]) -> bool:
        """Check whether text describes total funding."""
        if not text:
            return False

        normalized = text.lower().strip()
        return any(keyword in normalized for keyword in self.full_coverage_keywords)

    def is_range_format(self, text: Optional[str]) -> bool:
        if not text:
            return False
        return any(pattern.search(text) for pattern in RANGE_PATTERNS)

    def extract_max_from_range(self, text: Optional[str]) -> Optional[float]:
        """
        Extract the upper bound of a range.

        A single number ("up to $X") is returned as is.
        """
        numbers = self.extract_all_numeric_values(text)
        if not numbers:
            return None
        return max(numbers)

    def extract_numeric_value(self, text: Optional[str]) -> Optional[float]:
        """Extract the first number in text."""
        numbers = self.extract_all_numeric_values(text)
        return numbers[0] if numbers else None

    def extract_all_numeric_values(self, text: Optional[str]) -> list[float]:
        """
        Extract all numbers from text.

        Currency symbols are stripped and comma thousand separators removed.
        """
        if not text:
            return []

        cleaned = CURRENCY_SYMBOLS.sub("", text)

        values = []
        for match in NUMBER_PATTERN.findall(cleaned):
            try:
                values.append(float(match.replace(",", "")))
            except ValueError:
                continue
        return values
