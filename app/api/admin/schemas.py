"""
Admin API Validation Schemas
Handles request validation for admin endpoints
"""
from typing import Dict, Any, Tuple

from app.models.enums import BookingStatus, PaymentStatus, ReviewStatus, UserRole

TOUR_STATUSES = ('draft', 'published', 'archived')
TOUR_PACKAGE_TYPES = ('standard', 'umrah')

# Request field name -> Tour attribute for plain text fields
TOUR_TEXT_FIELDS = {
    'title': 'title',
    'category': 'category',
    'description': 'description',
    'departure': 'departure',
    'accommodation': 'accommodation',
    'dates': 'dates',
    'image': 'image',
}

TOUR_LIST_FIELDS = ('itinerary', 'inclusions', 'exclusions', 'gallery')


class AdminSchemas:
    """Validation schemas for admin API endpoints"""

    # ===== Booking Management Schemas =====

    @staticmethod
    def validate_booking_update(data: Dict[str, Any]) -> Tuple[bool, Dict[str, str], Dict[str, Any]]:
        """Validate booking update request"""
        errors = {}
        cleaned_data = {}

        if 'bookingStatus' in data:
            valid_statuses = [s.value for s in BookingStatus]
            status = str(data['bookingStatus']).lower()
            if status not in valid_statuses:
                errors['bookingStatus'] = f'Status must be one of: {", ".join(valid_statuses)}'
            else:
                cleaned_data['booking_status'] = BookingStatus(status)

        if 'paymentStatus' in data:
            valid_statuses = [s.value for s in PaymentStatus]
            status = str(data['paymentStatus']).lower()
            if status not in valid_statuses:
                errors['paymentStatus'] = f'Payment status must be one of: {", ".join(valid_statuses)}'
            else:
                cleaned_data['payment_status'] = PaymentStatus(status)

        if 'specialRequests' in data:
            cleaned_data['special_requests'] = str(data['specialRequests']).strip() if data['specialRequests'] else None

        return len(errors) == 0, errors, cleaned_data

    # ===== Tour Management Schemas =====

    @staticmethod
    def validate_tour(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Dict[str, str], Dict[str, Any]]:
        """Validate tour create (partial=False) or update (partial=True) request"""
        errors = {}
        cleaned_data = {}

        if not partial:
            for field in ('title', 'category', 'pricePerPerson'):
                if field not in data or not str(data[field]).strip():
                    errors[field] = f'{field} is required'
            if errors:
                return False, errors, cleaned_data

        for key, attribute in TOUR_TEXT_FIELDS.items():
            if key in data:
                value = str(data[key]).strip() if data[key] else None
                if key in ('title', 'category') and not value:
                    errors[key] = f'{key} cannot be empty'
                else:
                    cleaned_data[attribute] = value

        if 'pricePerPerson' in data:
            try:
                price = float(data['pricePerPerson'])
                if price < 0:
                    errors['pricePerPerson'] = 'Price cannot be negative'
                else:
                    cleaned_data['price_per_person'] = price
            except (ValueError, TypeError):
                errors['pricePerPerson'] = 'Price must be a valid number'

        if 'packageType' in data:
            package_type = str(data['packageType']).lower()
            if package_type not in TOUR_PACKAGE_TYPES:
                errors['packageType'] = f'Package type must be one of: {", ".join(TOUR_PACKAGE_TYPES)}'
            else:
                cleaned_data['package_type'] = package_type

        if 'status' in data:
            status = str(data['status']).lower()
            if status not in TOUR_STATUSES:
                errors['status'] = f'Status must be one of: {", ".join(TOUR_STATUSES)}'
            else:
                cleaned_data['status'] = status

        for field in TOUR_LIST_FIELDS:
            if field in data:
                if data[field] is not None and not isinstance(data[field], list):
                    errors[field] = f'{field} must be a list'
                else:
                    cleaned_data[field] = data[field] or []

        return len(errors) == 0, errors, cleaned_data

    # ===== Review Moderation Schemas =====

    @staticmethod
    def validate_review_status(data: Dict[str, Any]) -> Tuple[bool, Dict[str, str], Dict[str, Any]]:
        valid_statuses = [s.value for s in ReviewStatus]
        status = str(data.get('status') or '').lower()
        if status not in valid_statuses:
            return False, {'status': f'Status must be one of: {", ".join(valid_statuses)}'}, {}
        return True, {}, {'status': ReviewStatus(status)}

    # ===== User Management Schemas =====

    @staticmethod
    def validate_user_update(data: Dict[str, Any]) -> Tuple[bool, Dict[str, str], Dict[str, Any]]:
        """Validate role and account status changes"""
        errors = {}
        cleaned_data = {}

        if 'role' in data:
            valid_roles = [r.value for r in UserRole]
            role = str(data['role']).lower()
            if role not in valid_roles:
                errors['role'] = f'Role must be one of: {", ".join(valid_roles)}'
            else:
                cleaned_data['role'] = UserRole(role)

        if 'isActive' in data:
            if not isinstance(data['isActive'], bool):
                errors['isActive'] = 'isActive must be true or false'
            else:
                cleaned_data['is_active'] = data['isActive']

        if not errors and not cleaned_data:
            errors['body'] = 'Nothing to update'

        return len(errors) == 0, errors, cleaned_data

    # ===== Utility Schemas =====

    @staticmethod
    def validate_pagination(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean pagination parameters"""
        page = 1
        per_page = 20

        if 'page' in data:
            try:
                page = max(1, int(data['page']))
            except (ValueError, TypeError):
                pass

        if 'perPage' in data:
            try:
                per_page = min(100, max(1, int(data['perPage'])))
            except (ValueError, TypeError):
                pass

        return {'page': page, 'per_page': per_page}
