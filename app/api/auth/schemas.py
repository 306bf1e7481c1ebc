"""
Authentication validation schemas
"""
import re
from typing import Optional, Dict, Any, Tuple

from app.utils.validation import Validator


class AuthSchemas:
    """Validation schemas for authentication endpoints"""

    @staticmethod
    def validate_registration(data: Dict[str, Any]) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        """
        Validate user registration data

        Args:
            data: Dictionary containing registration data

        Returns:
            Tuple of (is_valid, errors, cleaned_data)
        """
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, None

        errors = {}
        cleaned_data = {}

        # Full name validation and splitting
        full_name = str(data.get('fullName') or '').strip()
        if not full_name:
            errors['fullName'] = 'Full name is required'
        elif len(full_name) < 2:
            errors['fullName'] = 'Full name must be at least 2 characters'
        else:
            name_parts = full_name.split(None, 1)
            cleaned_data['first_name'] = name_parts[0]
            cleaned_data['last_name'] = name_parts[1] if len(name_parts) > 1 else name_parts[0]

        # Email validation
        email = str(data.get('email') or '').strip().lower()
        if not email:
            errors['email'] = 'Email is required'
        elif not Validator.validate_email(email):
            errors['email'] = 'Invalid email format'
        else:
            cleaned_data['email'] = email

        # Password validation
        password = data.get('password') or ''
        if not password:
            errors['password'] = 'Password is required'
        elif len(password) < 8:
            errors['password'] = 'Password must be at least 8 characters'
        elif not AuthSchemas._validate_password_strength(password):
            errors['password'] = 'Password must contain at least one letter and one number'
        else:
            cleaned_data['password'] = password

        confirm_password = data.get('confirmPassword') or ''
        if not confirm_password:
            errors['confirmPassword'] = 'Password confirmation is required'
        elif password != confirm_password:
            errors['confirmPassword'] = 'Passwords do not match'

        # Optional phone validation
        phone = str(data.get('phone') or '').strip()
        if phone:
            if not Validator.validate_phone(phone):
                errors['phone'] = 'Invalid phone number format'
            else:
                cleaned_data['phone'] = phone

        is_valid = len(errors) == 0
        return is_valid, errors if not is_valid else None, cleaned_data if is_valid else None

    @staticmethod
    def validate_login(data: Dict[str, Any]) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        """Validate user login data"""
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, None

        errors = {}
        cleaned_data = {}

        email = str(data.get('email') or '').strip().lower()
        if not email:
            errors['email'] = 'Email is required'
        elif not Validator.validate_email(email):
            errors['email'] = 'Invalid email format'
        else:
            cleaned_data['email'] = email

        password = data.get('password') or ''
        if not password:
            errors['password'] = 'Password is required'
        else:
            cleaned_data['password'] = password

        is_valid = len(errors) == 0
        return is_valid, errors if not is_valid else None, cleaned_data if is_valid else None

    @staticmethod
    def _validate_password_strength(password: str) -> bool:
        """At least one letter and one digit"""
        return bool(re.search(r'[A-Za-z]', password)) and bool(re.search(r'\d', password))
