from flask import current_app, has_request_context, request


class AuditLogger:
    """Log important actions for audit trail"""

    @staticmethod
    def log_action(
        user_id: str,
        action: str,
        entity_type: str = None,
        entity_id: str = None,
        description: str = None,
        changes: dict = None
    ):
        """Log an action to audit trail. Failures never break the request."""
        from app.models import AuditLog
        from app.extensions import db

        log = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            changes=changes,
            ip_address=request.remote_addr if has_request_context() else None,
            user_agent=request.headers.get('User-Agent') if has_request_context() else None
        )

        try:
            db.session.add(log)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Audit log error ({action}): {str(e)}")
            return None
        return log
