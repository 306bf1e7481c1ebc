"""
Booking, application and dependant request validation
Every validator returns (is_valid, errors, cleaned_data) with errors keyed by
the request field name and cleaned_data keyed by model attribute.
"""
from typing import Optional, Dict, Any, Tuple

from app.models.application import APPLICATION_DATE_FIELDS, APPLICATION_FORM_FIELDS
from app.models.enums import Gender
from app.utils.validation import Validator


def to_camel(field: str) -> str:
    head, *rest = field.split('_')
    return head + ''.join(part.capitalize() for part in rest)


# Request field name -> model attribute
APPLICATION_REQUEST_FIELDS = {to_camel(field): field for field in APPLICATION_FORM_FIELDS}

PERSONAL_FIELDS = (
    'country_of_nationality', 'first_name', 'father_name', 'last_name', 'gender',
    'marital_status', 'country_of_birth', 'city_of_birth', 'profession',
)


def _clean_value(field: str, value, errors: Dict[str, str], key: str):
    """Normalise one form value, recording an error under `key` if it is invalid"""
    if field in APPLICATION_DATE_FIELDS:
        is_valid, parsed = Validator.parse_date(value)
        if not is_valid:
            errors[key] = 'Invalid date format. Use YYYY-MM-DD'
        return parsed

    if value is None:
        return None
    if not isinstance(value, (str, int, float)):
        errors[key] = 'Must be a text value'
        return None

    text = Validator.sanitize_input(value, max_length=500)
    if field == 'gender' and text:
        text = text.lower()
        if text not in {g.value for g in Gender}:
            errors[key] = 'Gender must be one of: male, female, other'
    return text or None


class ApplicationSchemas:
    """Validation for visa application forms"""

    @staticmethod
    def validate_submission(data: Dict[str, Any]) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        """
        Validate a full application form submission.

        Unknown fields are ignored; missing fields are treated as empty.
        """
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, None

        errors = {}
        cleaned_data = {}
        for key, field in APPLICATION_REQUEST_FIELDS.items():
            cleaned_data[field] = _clean_value(field, data.get(key), errors, key)

        if errors:
            return False, errors, None
        return True, None, cleaned_data

    @staticmethod
    def validate_patch(data: Dict[str, Any]) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        """Validate a partial update; only fields present in the request are returned"""
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, None

        errors = {}
        cleaned_data = {}
        for key, field in APPLICATION_REQUEST_FIELDS.items():
            if key in data:
                cleaned_data[field] = _clean_value(field, data[key], errors, key)

        if errors:
            return False, errors, None
        return True, None, cleaned_data


class BookingSchemas:
    """Validation for booking checkout"""

    @staticmethod
    def validate_booking_create(data: Dict[str, Any]) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, None

        errors = {}
        cleaned_data = {}

        tour_id = Validator.sanitize_input(data.get('tourId'))
        if not tour_id:
            errors['tourId'] = 'Tour is required'
        else:
            cleaned_data['tour_id'] = tour_id

        customer_name = Validator.sanitize_input(data.get('customerName'), max_length=120)
        if len(customer_name) < 2:
            errors['customerName'] = 'Name must be at least 2 characters'
        else:
            cleaned_data['customer_name'] = customer_name

        customer_email = Validator.sanitize_input(data.get('customerEmail'), max_length=120).lower()
        if not Validator.validate_email(customer_email):
            errors['customerEmail'] = 'Invalid email address'
        else:
            cleaned_data['customer_email'] = customer_email

        customer_phone = Validator.sanitize_input(data.get('customerPhone'), max_length=30)
        if not Validator.validate_phone(customer_phone):
            errors['customerPhone'] = 'Invalid phone number format'
        else:
            cleaned_data['customer_phone'] = customer_phone

        try:
            travelers = int(data.get('numberOfTravelers', 1))
            if travelers < 1 or travelers > 50:
                errors['numberOfTravelers'] = 'Number of travelers must be between 1 and 50'
            else:
                cleaned_data['number_of_travelers'] = travelers
        except (ValueError, TypeError):
            errors['numberOfTravelers'] = 'Number of travelers must be a whole number'

        is_valid, booking_date = Validator.parse_date(data.get('bookingDate'))
        if not is_valid:
            errors['bookingDate'] = 'Invalid date format. Use YYYY-MM-DD'
        else:
            cleaned_data['booking_date'] = booking_date

        special_requests = Validator.sanitize_input(data.get('specialRequests'), max_length=1000)
        if special_requests:
            cleaned_data['special_requests'] = special_requests

        if errors:
            return False, errors, None
        return True, None, cleaned_data


class DependantSchemas:
    """Validation for dependants and saved dependant profiles"""

    @staticmethod
    def validate_dependant(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        """
        Validate dependant details.

        Name and relationship are not required here since a saved profile
        may supply them. Use validate_profile for standalone records.
        """
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, None

        errors = {}
        cleaned_data = {}

        for key, field in (('name', 'name'), ('relationship', 'relationship'), ('passportNumber', 'passport_number')):
            if key in data or not partial:
                value = Validator.sanitize_input(data.get(key), max_length=120)
                if value or key in data:
                    cleaned_data[field] = value or None

        if 'dateOfBirth' in data or not partial:
            is_valid, dob = Validator.parse_date(data.get('dateOfBirth'))
            if not is_valid:
                errors['dateOfBirth'] = 'Invalid date format. Use YYYY-MM-DD'
            elif dob or 'dateOfBirth' in data:
                cleaned_data['date_of_birth'] = dob

        for field in PERSONAL_FIELDS:
            key = to_camel(field)
            if key in data:
                cleaned_data[field] = _clean_value(field, data[key], errors, key)

        if errors:
            return False, errors, None
        return True, None, cleaned_data

    @staticmethod
    def validate_profile(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Optional[Dict[str, str]], Optional[Dict[str, Any]]]:
        is_valid, errors, cleaned_data = DependantSchemas.validate_dependant(data, partial=partial)
        if not is_valid:
            return is_valid, errors, cleaned_data

        errors = {}
        for key, label in (('name', 'Name'), ('relationship', 'Relationship')):
            if (not partial or key in cleaned_data) and not cleaned_data.get(key):
                errors[key] = f"{label} is required"

        if errors:
            return False, errors, None
        return True, None, cleaned_data
