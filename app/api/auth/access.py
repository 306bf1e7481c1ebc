from flask import request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from datetime import datetime, timezone

from app.extensions import db
from app.models import User
from app.api.auth.schemas import AuthSchemas
from app.api.auth.registration import issue_access_token
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger

from app.api.auth import auth_bp


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Login user with email and password

    Request Body:
        {
            "email": "john@example.com",
            "password": "SecurePass123"
        }

    Returns:
        200: Login successful with an access token
        401: Invalid credentials
        403: Account deactivated
        422: Validation error
    """
    try:
        data = request.get_json(silent=True)

        is_valid, errors, cleaned_data = AuthSchemas.validate_login(data)
        if not is_valid:
            return APIResponse.validation_error(errors)

        user = User.query.filter_by(email=cleaned_data['email']).first()

        if not user or not user.check_password(cleaned_data['password']):
            if user:
                AuditLogger.log_action(
                    user_id=user.id,
                    action='login_failed',
                    description='Failed login attempt - invalid password'
                )
            return APIResponse.unauthorized('Invalid email or password')

        if not user.is_active:
            return APIResponse.forbidden('Your account has been deactivated. Please contact support.')

        user.last_login = datetime.now(timezone.utc)
        db.session.commit()

        AuditLogger.log_action(
            user_id=user.id,
            action='user_login',
            description=f'User logged in: {user.email}'
        )

        return APIResponse.success(
            data={
                'user': user.to_dict(),
                'tokens': {
                    'accessToken': issue_access_token(user),
                    'tokenType': 'Bearer'
                }
            },
            message='Login successful'
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Login error: {str(e)}")
        return APIResponse.error('An error occurred during login. Please try again.', status_code=500)


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    """Profile of the authenticated user"""
    try:
        user = db.session.get(User, get_jwt_identity())
        if not user:
            return APIResponse.not_found('User not found')

        return APIResponse.success(data={'user': user.to_dict()})

    except Exception as e:
        current_app.logger.error(f"Get current user error: {str(e)}")
        return APIResponse.error('Failed to fetch user', status_code=500)
