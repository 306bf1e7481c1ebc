from flask import request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from sqlalchemy import desc

from app.api.bookings.schemas import DependantSchemas
from app.api.profiles import profiles_bp
from app.extensions import db
from app.models import UserDependantProfile
from app.services.errors import ApplicationError, Forbidden
from app.services.records import load_dependant_profile
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger


def _owned_profile(profile_id):
    profile = load_dependant_profile(profile_id)
    if profile.user_id != get_jwt_identity():
        raise Forbidden("You don't have permission to access this dependant profile")
    return profile


def _apply(profile, cleaned_data):
    for field in UserDependantProfile.COPYABLE_FIELDS:
        if field in cleaned_data:
            setattr(profile, field, cleaned_data[field])


@profiles_bp.route('', methods=['GET'])
@jwt_required()
def get_profiles():
    try:
        profiles = UserDependantProfile.query.filter_by(
            user_id=get_jwt_identity()
        ).order_by(desc(UserDependantProfile.created_at)).all()

        return APIResponse.success(data=[profile.to_dict() for profile in profiles])

    except Exception as e:
        current_app.logger.error(f"Get dependant profiles error: {str(e)}")
        return APIResponse.error("Failed to fetch dependant profiles", status_code=500)


@profiles_bp.route('', methods=['POST'])
@jwt_required()
def create_profile():
    """
    Save a dependant profile

    Request Body:
        {
            "name": "Sara Doe",
            "relationship": "daughter",
            "dateOfBirth": "2015-04-02" (optional),
            "passportNumber": "X1234567" (optional),
            "firstName", "lastName", "gender", ... (optional personal details)
        }
    """
    try:
        is_valid, errors, cleaned_data = DependantSchemas.validate_profile(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        user_id = get_jwt_identity()
        profile = UserDependantProfile(user_id=user_id)
        _apply(profile, cleaned_data)
        db.session.add(profile)
        db.session.commit()

        AuditLogger.log_action(
            user_id=user_id,
            action='dependant_profile_created',
            entity_type='dependant_profile',
            entity_id=profile.id,
            description=f'Saved dependant profile {profile.name}'
        )

        return APIResponse.success(data=profile.to_dict(), message='Dependant profile saved', status_code=201)

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Create dependant profile error: {str(e)}")
        return APIResponse.error("Failed to save dependant profile", status_code=500)


@profiles_bp.route('/<profile_id>', methods=['GET'])
@jwt_required()
def get_profile(profile_id):
    try:
        return APIResponse.success(data=_owned_profile(profile_id).to_dict())

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get dependant profile error: {str(e)}")
        return APIResponse.error("Failed to fetch dependant profile", status_code=500)


@profiles_bp.route('/<profile_id>', methods=['PATCH'])
@jwt_required()
def update_profile(profile_id):
    try:
        profile = _owned_profile(profile_id)

        is_valid, errors, cleaned_data = DependantSchemas.validate_profile(
            request.get_json(silent=True), partial=True
        )
        if not is_valid:
            return APIResponse.validation_error(errors)

        _apply(profile, cleaned_data)
        db.session.commit()

        return APIResponse.success(data=profile.to_dict(), message='Dependant profile updated')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Update dependant profile error: {str(e)}")
        return APIResponse.error("Failed to update dependant profile", status_code=500)


@profiles_bp.route('/<profile_id>', methods=['DELETE'])
@jwt_required()
def delete_profile(profile_id):
    try:
        profile = _owned_profile(profile_id)
        db.session.delete(profile)
        db.session.commit()

        AuditLogger.log_action(
            user_id=get_jwt_identity(),
            action='dependant_profile_deleted',
            entity_type='dependant_profile',
            entity_id=profile_id,
            description='Deleted dependant profile'
        )

        return APIResponse.success(message='Dependant profile deleted')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete dependant profile error: {str(e)}")
        return APIResponse.error("Failed to delete dependant profile", status_code=500)
