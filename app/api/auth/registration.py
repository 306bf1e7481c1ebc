from flask import request, current_app
from flask_jwt_extended import create_access_token
from app.extensions import db
from app.models import User
from app.models.enums import UserRole
from app.api.auth.schemas import AuthSchemas
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger

from app.api.auth import auth_bp


def issue_access_token(user):
    """Access token carrying the claims the access checks read"""
    return create_access_token(
        identity=user.id,
        additional_claims={'email': user.email, 'role': user.role.value}
    )


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new customer account

    Request Body:
        {
            "fullName": "John Doe",
            "email": "john@example.com",
            "password": "SecurePass123",
            "confirmPassword": "SecurePass123",
            "phone": "+1234567890" (optional)
        }

    Returns:
        201: User created with an access token
        409: Email already exists
        422: Validation error
    """
    try:
        data = request.get_json(silent=True)

        is_valid, errors, cleaned_data = AuthSchemas.validate_registration(data)
        if not is_valid:
            return APIResponse.validation_error(errors)

        existing_user = User.query.filter_by(email=cleaned_data['email']).first()
        if existing_user:
            return APIResponse.error('Email already registered', status_code=409, code='email_taken')

        user = User(
            email=cleaned_data['email'],
            first_name=cleaned_data['first_name'],
            last_name=cleaned_data['last_name'],
            phone=cleaned_data.get('phone'),
            role=UserRole.CUSTOMER,
            is_active=True
        )
        user.set_password(cleaned_data['password'])

        db.session.add(user)
        db.session.commit()

        AuditLogger.log_action(
            user_id=user.id,
            action='user_registered',
            entity_type='user',
            entity_id=user.id,
            description=f'New user registered: {user.email}'
        )

        return APIResponse.success(
            data={
                'user': user.to_dict(),
                'tokens': {
                    'accessToken': issue_access_token(user),
                    'tokenType': 'Bearer'
                }
            },
            message='Registration successful',
            status_code=201
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Registration error: {str(e)}")
        return APIResponse.error('An error occurred during registration. Please try again.', status_code=500)
