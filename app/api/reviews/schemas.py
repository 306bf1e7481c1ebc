from typing import Dict, Any, Tuple

from app.utils.validation import Validator

MIN_RATING = 1
MAX_RATING = 5


class ReviewSchemas:

    @staticmethod
    def validate_review(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Dict[str, str], Dict[str, Any]]:
        """
        Validate a review create (partial=False) or edit (partial=True) request.

        Only rating and comment are editable; the tour is fixed at creation.
        """
        if not isinstance(data, dict):
            return False, {'body': 'Request body must be a JSON object'}, {}

        errors = {}
        cleaned_data = {}

        if not partial:
            tour_id = Validator.sanitize_input(data.get('tourId'))
            if not tour_id:
                errors['tourId'] = 'Tour is required'
            else:
                cleaned_data['tour_id'] = tour_id

        if 'rating' in data or not partial:
            rating = data.get('rating')
            if isinstance(rating, bool) or not isinstance(rating, (int, float, str)) or not str(rating).strip():
                errors['rating'] = 'Rating is required'
            else:
                try:
                    value = float(rating)
                    if not value.is_integer() or not MIN_RATING <= value <= MAX_RATING:
                        raise ValueError
                    cleaned_data['rating'] = int(value)
                except ValueError:
                    errors['rating'] = f'Rating must be a whole number from {MIN_RATING} to {MAX_RATING}'

        if 'comment' in data or not partial:
            comment = Validator.sanitize_input(data.get('comment'), max_length=2000)
            if not comment:
                errors['comment'] = 'Comment is required'
            else:
                cleaned_data['comment'] = comment

        return len(errors) == 0, errors, cleaned_data
