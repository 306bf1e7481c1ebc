import re
from datetime import date, datetime
from typing import Optional, Tuple

from dateutil import parser as date_parser


class Validator:
    """Input validation helpers"""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email or '') is not None

    @staticmethod
    def validate_phone(phone: str) -> bool:
        """Validate phone number format"""
        # Remove common formatting characters
        cleaned = re.sub(r'[\s\-\(\)\+]', '', phone or '')
        # Check if it's 7-15 digits
        return cleaned.isdigit() and 7 <= len(cleaned) <= 15

    @staticmethod
    def parse_date(value) -> Tuple[bool, Optional[date]]:
        """
        Parse a calendar date from a date, datetime or ISO-like string.

        Returns:
            Tuple of (is_valid, parsed_date); empty values are valid and parse to None
        """
        if value is None or value == '':
            return True, None
        if isinstance(value, datetime):
            return True, value.date()
        if isinstance(value, date):
            return True, value
        if not isinstance(value, str):
            return False, None
        try:
            return True, date_parser.isoparse(value.strip()).date()
        except (ValueError, OverflowError):
            return False, None

    @staticmethod
    def sanitize_input(text, max_length: int = None) -> str:
        """Sanitize user input"""
        if not text:
            return ""

        # Remove leading/trailing whitespace
        text = str(text).strip()

        # Truncate if needed
        if max_length and len(text) > max_length:
            text = text[:max_length]

        return text
