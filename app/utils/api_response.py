from flask import jsonify


class APIResponse:
    """Standardized API response format"""

    @staticmethod
    def success(data=None, message=None, status_code=200):
        """Success response"""
        response = {
            'success': True,
            'message': message or 'Operation successful'
        }
        if data is not None:
            response['data'] = data
        return jsonify(response), status_code

    @staticmethod
    def error(message, errors=None, status_code=400, code=None):
        """Error response"""
        response = {
            'success': False,
            'message': message
        }
        if code:
            response['code'] = code
        if errors:
            response['errors'] = errors
        return jsonify(response), status_code

    @staticmethod
    def from_exception(exc):
        """Render an ApplicationError raised by a service"""
        return APIResponse.error(exc.message, errors=exc.errors, status_code=exc.status_code, code=exc.code)

    @staticmethod
    def validation_error(errors, message="Validation failed"):
        """Validation error response"""
        return APIResponse.error(message, errors=errors, status_code=422, code='validation_failed')

    @staticmethod
    def unauthorized(message="Unauthorized access"):
        """Unauthorized response"""
        return APIResponse.error(message, status_code=401, code='unauthenticated')

    @staticmethod
    def forbidden(message="Forbidden"):
        """Forbidden response"""
        return APIResponse.error(message, status_code=403, code='forbidden')

    @staticmethod
    def not_found(message="Resource not found"):
        """Not found response"""
        return APIResponse.error(message, status_code=404, code='not_found')


def register_jwt_handlers(jwt):
    """Render token problems with the standard envelope"""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return APIResponse.unauthorized('Please login to continue')

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return APIResponse.unauthorized('Invalid token')

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return APIResponse.unauthorized('Token has expired')
