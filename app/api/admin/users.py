from flask import request, current_app
from sqlalchemy import or_, desc

from app.api.admin import admin_bp
from app.api.admin.schemas import AdminSchemas
from app.extensions import db
from app.models import User
from app.models.enums import UserRole
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import admin_required, current_caller

# ===== USER MANAGEMENT =====


@admin_bp.route('/users', methods=['GET'])
@admin_required()
def get_users():
    """
    Get paginated list of users, newest first

    Query params:
        - page, perPage: Pagination
        - search: Search in name/email
        - role: Filter by role
        - isActive: Filter by active status
    """
    try:
        args = request.args.to_dict()
        pagination = AdminSchemas.validate_pagination(args)

        query = User.query

        if args.get('search'):
            search_term = f"%{args['search']}%"
            query = query.filter(
                or_(
                    User.first_name.ilike(search_term),
                    User.last_name.ilike(search_term),
                    User.email.ilike(search_term)
                )
            )

        if args.get('role'):
            try:
                query = query.filter(User.role == UserRole[args['role'].upper()])
            except KeyError:
                return APIResponse.error("Invalid role filter")

        if args.get('isActive') in ['true', 'false']:
            query = query.filter(User.is_active == (args['isActive'] == 'true'))

        paginated = query.order_by(desc(User.created_at)).paginate(
            page=pagination['page'],
            per_page=pagination['per_page'],
            error_out=False
        )

        users = []
        for user in paginated.items:
            data = user.to_dict()
            data['booking_count'] = user.bookings.count()
            users.append(data)

        return APIResponse.success({
            'users': users,
            'pagination': {
                'page': paginated.page,
                'perPage': paginated.per_page,
                'totalPages': paginated.pages,
                'totalItems': paginated.total
            }
        })

    except Exception as e:
        current_app.logger.error(f"Get users error: {str(e)}")
        return APIResponse.error("Failed to fetch users", status_code=500)


@admin_bp.route('/users/<user_id>', methods=['PATCH'])
@admin_required()
def update_user(user_id):
    """
    Change a user's role or deactivate the account

    Request Body:
        {
            "role": "customer" | "admin" (optional),
            "isActive": true | false (optional)
        }
    """
    try:
        user = db.session.get(User, user_id)
        if not user:
            return APIResponse.not_found("User not found")

        is_valid, errors, cleaned_data = AdminSchemas.validate_user_update(request.get_json(silent=True) or {})
        if not is_valid:
            return APIResponse.validation_error(errors)

        admin_id = current_caller().user_id
        if user.id == admin_id and (
            cleaned_data.get('role', UserRole.ADMIN) != UserRole.ADMIN or cleaned_data.get('is_active') is False
        ):
            return APIResponse.error("You cannot demote or deactivate your own account", status_code=400)

        changes = {}
        for field, value in cleaned_data.items():
            old = getattr(user, field)
            setattr(user, field, value)
            changes[field] = {
                'old': old.value if isinstance(old, UserRole) else old,
                'new': value.value if isinstance(value, UserRole) else value
            }
        db.session.commit()

        AuditLogger.log_action(
            user_id=admin_id,
            action='user_updated',
            entity_type='user',
            entity_id=user.id,
            description=f'Updated user {user.email}',
            changes=changes
        )

        return APIResponse.success(data=user.to_dict(), message='User updated successfully')

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Update user error: {str(e)}")
        return APIResponse.error("Failed to update user", status_code=500)
