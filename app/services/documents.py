"""
Application documents for the main applicant (stored on the Booking) and for
dependants.

Each applicant has two single-document slots (personal passport picture and
international passport) and an open list of named supporting documents.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from app.extensions import db
from app.models.application import SLOT_ATTRIBUTES
from app.models.enums import DocumentType
from app.services.access import ensure_booking_access, ensure_dependant_access, find_user_email
from app.services.errors import NotFound, UpstreamFailure, ValidationFailed
from app.services.records import load_booking, load_dependant
from app.services.storage import create_storage_service

logger = logging.getLogger(__name__)

SLOT_DISPLAY_NAMES = {
    DocumentType.PERSONAL_PASSPORT_PICTURE: 'Personal Passport Picture',
    DocumentType.INTERNATIONAL_PASSPORT: 'International Passport',
}


def parse_document_type(value) -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError:
        valid = ', '.join(t.value for t in DocumentType)
        raise ValidationFailed(f"Valid documentType is required ({valid})")


def _matches(document, document_id):
    return bool(document) and document_id in (document.get('_id'), document.get('publicId'))


class DocumentSlotManager:
    """Places uploaded documents into an applicant's slots"""

    def __init__(self, storage):
        self.storage = storage

    def delete_quietly(self, public_id):
        """Remove a stored object; failures are logged and ignored"""
        if not public_id:
            return
        try:
            self.storage.delete(public_id)
        except UpstreamFailure as e:
            logger.error(f"Error deleting stored document {public_id}: {e.message}")

    def attach(
        self,
        parent,
        document_type,
        data: bytes,
        filename: str,
        folder: str,
        content_type: Optional[str] = None,
        name: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Dict:
        """
        Upload a document and put it in its slot.

        A fixed slot keeps only the newest document and the previous object is
        removed from storage. Supporting documents are appended in upload order.

        Raises:
            ValidationFailed: Unknown document type, or a supporting document without a name
            UpstreamFailure: The upload itself failed; nothing is changed
        """
        document_type = parse_document_type(document_type)
        name = (name or '').strip()
        if document_type == DocumentType.SUPPORTING_DOCUMENT and not name:
            raise ValidationFailed('Document name is required for supporting documents')

        stored = self.storage.upload(data, folder, filename, content_type)
        document = {
            '_id': uuid.uuid4().hex,
            'name': name if document_type == DocumentType.SUPPORTING_DOCUMENT else SLOT_DISPLAY_NAMES[document_type],
            'url': stored['url'],
            'publicId': stored['publicId'],
            'documentType': document_type.value,
            'uploadedAt': (now or datetime.now(timezone.utc)).isoformat(),
        }

        if document_type in SLOT_ATTRIBUTES:
            attribute = SLOT_ATTRIBUTES[document_type]
            previous = getattr(parent, attribute)
            if previous:
                self.delete_quietly(previous.get('publicId'))
            setattr(parent, attribute, document)
        else:
            parent.supporting_documents = list(parent.supporting_documents or []) + [document]

        self._mirror_to_legacy_list(parent, document)
        return document

    @staticmethod
    def _mirror_to_legacy_list(parent, document):
        # Backward compatibility: older clients read every upload from `documents`.
        # The typed slots above are the source of truth.
        parent.documents = list(parent.documents or []) + [document]

    def detach(self, parent, document_id: str) -> Dict:
        """
        Remove a document by its _id or publicId.

        Looks in the passport picture slot, the passport slot, the supporting
        documents and finally the legacy list, and removes the first match.

        Raises:
            NotFound: No document with that id
        """
        removed = None

        for attribute in SLOT_ATTRIBUTES.values():
            if _matches(getattr(parent, attribute), document_id):
                removed = getattr(parent, attribute)
                setattr(parent, attribute, None)
                break

        if removed is None:
            removed = self._remove_from_list(parent, 'supporting_documents', document_id)
        if removed is None:
            removed = self._remove_from_list(parent, 'documents', document_id)
        if removed is None:
            raise NotFound('Document not found')

        self.delete_quietly(removed.get('publicId'))
        return removed

    @staticmethod
    def _remove_from_list(parent, attribute, document_id):
        documents = list(getattr(parent, attribute) or [])
        for index, document in enumerate(documents):
            if _matches(document, document_id):
                removed = documents.pop(index)
                setattr(parent, attribute, documents)
                return removed
        return None

    @staticmethod
    def stored_public_ids(parent):
        """Every distinct stored object the applicant references"""
        public_ids = []
        candidates = [getattr(parent, attribute) for attribute in SLOT_ATTRIBUTES.values()]
        candidates += list(parent.supporting_documents or [])
        candidates += list(parent.documents or [])
        for document in candidates:
            public_id = document.get('publicId') if document else None
            if public_id and public_id not in public_ids:
                public_ids.append(public_id)
        return public_ids

    def purge(self, public_ids):
        for public_id in public_ids:
            self.delete_quietly(public_id)


class DocumentService:
    """Access-checked document operations"""

    def __init__(self, storage, user_lookup=find_user_email):
        self.slots = DocumentSlotManager(storage)
        self.user_lookup = user_lookup

    # ----- Main applicant -----

    def get_booking_documents(self, caller, booking_id):
        booking = load_booking(booking_id)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)
        return booking

    def attach_booking_document(self, caller, booking_id, document_type, data, filename,
                                content_type=None, name=None):
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)

        document = self.slots.attach(
            booking, document_type, data, filename,
            folder=f"bookings/{booking.id}/user",
            content_type=content_type,
            name=name
        )
        db.session.commit()
        logger.info(f"Attached {document['documentType']} {document['_id']} to booking {booking.id}")
        return document

    def detach_booking_document(self, caller, booking_id, document_id):
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)

        removed = self.slots.detach(booking, document_id)
        db.session.commit()
        logger.info(f"Removed document {document_id} from booking {booking.id}")
        return removed

    # ----- Dependants -----

    def get_dependant_documents(self, caller, dependant_id):
        dependant = load_dependant(dependant_id)
        ensure_dependant_access(caller, dependant)
        return dependant

    def attach_dependant_document(self, caller, dependant_id, document_type, data, filename,
                                  content_type=None, name=None):
        dependant = load_dependant(dependant_id, lock=True)
        ensure_dependant_access(caller, dependant)

        document = self.slots.attach(
            dependant, document_type, data, filename,
            folder=f"bookings/{dependant.booking_id}/dependants/{dependant.id}",
            content_type=content_type,
            name=name
        )
        db.session.commit()
        logger.info(f"Attached {document['documentType']} {document['_id']} to dependant {dependant.id}")
        return document

    def detach_dependant_document(self, caller, dependant_id, document_id):
        dependant = load_dependant(dependant_id, lock=True)
        ensure_dependant_access(caller, dependant)

        removed = self.slots.detach(dependant, document_id)
        db.session.commit()
        logger.info(f"Removed document {document_id} from dependant {dependant.id}")
        return removed


def create_document_service():
    return DocumentService(create_storage_service())
