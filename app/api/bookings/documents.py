from flask import request, current_app
from flask_jwt_extended import jwt_required

from app.api.bookings import bookings_bp
from app.extensions import db
from app.services.documents import create_document_service
from app.services.errors import ApplicationError
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import current_caller
from app.utils.uploads import read_upload


def documents_payload(applicant):
    """Typed slots plus the legacy flat list"""
    data = applicant.documents_to_dict()
    data['documents'] = list(applicant.documents or [])
    return data


@bookings_bp.route('/<booking_id>/user-documents', methods=['GET'])
@jwt_required()
def get_user_documents(booking_id):
    try:
        booking = create_document_service().get_booking_documents(current_caller(), booking_id)
        return APIResponse.success(data=documents_payload(booking))

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get user documents error: {str(e)}")
        return APIResponse.error("Failed to fetch documents", status_code=500)


@bookings_bp.route('/<booking_id>/user-documents', methods=['POST'])
@jwt_required()
def upload_user_document(booking_id):
    """
    Upload a document for the main applicant

    Form Data:
        file: The document (pdf, png, jpg, jpeg, webp)
        documentType: personal_passport_picture | international_passport | supporting_document
        name: Display name, required for supporting documents
    """
    try:
        caller = current_caller()
        documents = create_document_service()
        documents.get_booking_documents(caller, booking_id)

        errors, upload = read_upload(request.files)
        if errors:
            return APIResponse.validation_error(errors)

        document = documents.attach_booking_document(
            caller,
            booking_id,
            request.form.get('documentType'),
            upload['data'],
            upload['filename'],
            content_type=upload['content_type'],
            name=request.form.get('name')
        )

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='document_uploaded',
            entity_type='booking',
            entity_id=booking_id,
            description=f"Uploaded {document['documentType']} {document['name']}"
        )

        return APIResponse.success(data=document, message='Document uploaded successfully', status_code=201)

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Upload user document error: {str(e)}")
        return APIResponse.error("Failed to upload document", status_code=500)


@bookings_bp.route('/<booking_id>/user-documents/<document_id>', methods=['DELETE'])
@jwt_required()
def delete_user_document(booking_id, document_id):
    try:
        caller = current_caller()
        removed = create_document_service().detach_booking_document(caller, booking_id, document_id)

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='document_deleted',
            entity_type='booking',
            entity_id=booking_id,
            description=f"Deleted {removed.get('documentType', 'document')} {document_id}"
        )

        return APIResponse.success(message='Document deleted successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete user document error: {str(e)}")
        return APIResponse.error("Failed to delete document", status_code=500)
