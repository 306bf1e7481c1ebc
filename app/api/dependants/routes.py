from flask import request, current_app
from flask_jwt_extended import jwt_required

from app.api.bookings.documents import documents_payload
from app.api.bookings.schemas import ApplicationSchemas
from app.api.dependants import dependants_bp
from app.extensions import db
from app.services.applications import create_application_service
from app.services.dependants import create_dependant_roster
from app.services.documents import create_document_service
from app.services.errors import ApplicationError
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import current_caller
from app.utils.uploads import read_upload

# ===== DEPENDANT RECORD =====


@dependants_bp.route('/<dependant_id>', methods=['GET'])
@jwt_required()
def get_dependant(dependant_id):
    try:
        dependant = create_dependant_roster().get_dependant(current_caller(), dependant_id)
        return APIResponse.success(data=dependant.to_dict())

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get dependant error: {str(e)}")
        return APIResponse.error("Failed to fetch dependant", status_code=500)


@dependants_bp.route('/<dependant_id>', methods=['DELETE'])
@jwt_required()
def delete_dependant(dependant_id):
    """Remove a dependant and its stored documents"""
    try:
        caller = current_caller()
        create_dependant_roster().remove_dependant(caller, dependant_id)

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='dependant_removed',
            entity_type='dependant',
            entity_id=dependant_id,
            description=f'Removed dependant {dependant_id}'
        )

        return APIResponse.success(message='Dependant deleted successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete dependant error: {str(e)}")
        return APIResponse.error("Failed to delete dependant", status_code=500)


# ===== DEPENDANT APPLICATION =====


def _application_payload(dependant):
    data = dependant.application_to_dict()
    data.update({
        'dependant_id': dependant.id,
        'booking_id': dependant.booking_id,
        'name': dependant.name,
        'relationship': dependant.relationship,
        'documents': dependant.documents_to_dict(),
    })
    return data


@dependants_bp.route('/<dependant_id>/application', methods=['GET'])
@jwt_required()
def get_dependant_application(dependant_id):
    try:
        dependant = create_application_service().get_dependant_application(current_caller(), dependant_id)
        return APIResponse.success(data=_application_payload(dependant))

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get dependant application error: {str(e)}")
        return APIResponse.error("Failed to fetch application", status_code=500)


@dependants_bp.route('/<dependant_id>/application', methods=['POST'])
@jwt_required()
def submit_dependant_application(dependant_id):
    try:
        caller = current_caller()
        service = create_application_service()
        service.get_dependant_application(caller, dependant_id)

        is_valid, errors, form_data = ApplicationSchemas.validate_submission(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        dependant, is_new_submission = service.submit_dependant_application(
            caller, dependant_id, form_data
        )

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_submitted' if is_new_submission else 'application_resubmitted',
            entity_type='dependant',
            entity_id=dependant.id,
            description=f'Dependant application {dependant.application_number} saved'
        )

        return APIResponse.success(
            data=_application_payload(dependant),
            message='Application submitted successfully' if is_new_submission else 'Application updated successfully',
            status_code=201 if is_new_submission else 200
        )

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Submit dependant application error: {str(e)}")
        return APIResponse.error("Failed to submit application", status_code=500)


@dependants_bp.route('/<dependant_id>/application', methods=['PATCH'])
@jwt_required()
def patch_dependant_application(dependant_id):
    try:
        caller = current_caller()
        service = create_application_service()
        service.get_dependant_application(caller, dependant_id)

        is_valid, errors, form_data = ApplicationSchemas.validate_patch(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        dependant = service.patch_dependant_application(caller, dependant_id, form_data)

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_updated',
            entity_type='dependant',
            entity_id=dependant.id,
            description='Dependant application updated',
            changes={'fields': sorted(form_data)}
        )

        return APIResponse.success(data=_application_payload(dependant), message='Application updated successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Patch dependant application error: {str(e)}")
        return APIResponse.error("Failed to update application", status_code=500)


# ===== DEPENDANT DOCUMENTS =====


@dependants_bp.route('/<dependant_id>/documents', methods=['GET'])
@jwt_required()
def get_dependant_documents(dependant_id):
    try:
        dependant = create_document_service().get_dependant_documents(current_caller(), dependant_id)
        return APIResponse.success(data=documents_payload(dependant))

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get dependant documents error: {str(e)}")
        return APIResponse.error("Failed to fetch documents", status_code=500)


@dependants_bp.route('/<dependant_id>/documents', methods=['POST'])
@jwt_required()
def upload_dependant_document(dependant_id):
    try:
        caller = current_caller()
        documents = create_document_service()
        documents.get_dependant_documents(caller, dependant_id)

        errors, upload = read_upload(request.files)
        if errors:
            return APIResponse.validation_error(errors)

        document = documents.attach_dependant_document(
            caller,
            dependant_id,
            request.form.get('documentType'),
            upload['data'],
            upload['filename'],
            content_type=upload['content_type'],
            name=request.form.get('name')
        )

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='document_uploaded',
            entity_type='dependant',
            entity_id=dependant_id,
            description=f"Uploaded {document['documentType']} {document['name']}"
        )

        return APIResponse.success(data=document, message='Document uploaded successfully', status_code=201)

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Upload dependant document error: {str(e)}")
        return APIResponse.error("Failed to upload document", status_code=500)


@dependants_bp.route('/<dependant_id>/documents/<document_id>', methods=['DELETE'])
@jwt_required()
def delete_dependant_document(dependant_id, document_id):
    try:
        caller = current_caller()
        removed = create_document_service().detach_dependant_document(caller, dependant_id, document_id)

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='document_deleted',
            entity_type='dependant',
            entity_id=dependant_id,
            description=f"Deleted {removed.get('documentType', 'document')} {document_id}"
        )

        return APIResponse.success(message='Document deleted successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete dependant document error: {str(e)}")
        return APIResponse.error("Failed to delete document", status_code=500)
