import io
import os
import itertools
import pytest
from unittest.mock import MagicMock

from app.services.documents import DocumentService
from app.services.errors import Forbidden, NotFound, UpstreamFailure, ValidationFailed


@pytest.fixture
def storage():
    counter = itertools.count(1)
    storage = MagicMock()

    def _upload(data, folder, filename, content_type=None):
        key = f"{folder}/obj{next(counter)}.pdf"
        return {'url': f"https://files.test/{key}", 'publicId': key}

    storage.upload.side_effect = _upload
    return storage


@pytest.fixture
def service(storage):
    return DocumentService(storage, user_lookup=lambda _: None)


def test_fixed_slot_upload(service, storage, paid_booking, customer, as_caller):
    document = service.attach_booking_document(
        as_caller(customer), paid_booking.id, 'international_passport', b'%PDF', 'passport.pdf', 'application/pdf'
    )

    assert document['name'] == 'International Passport'
    assert document['documentType'] == 'international_passport'
    assert document['publicId'] == f"bookings/{paid_booking.id}/user/obj1.pdf"
    assert paid_booking.international_passport['_id'] == document['_id']
    assert paid_booking.documents[-1]['_id'] == document['_id']
    storage.upload.assert_called_once_with(b'%PDF', f"bookings/{paid_booking.id}/user", 'passport.pdf', 'application/pdf')


def test_slot_replacement_deletes_previous_object(service, storage, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    first = service.attach_booking_document(caller, paid_booking.id, 'personal_passport_picture', b'1', 'a.png')
    second = service.attach_booking_document(caller, paid_booking.id, 'personal_passport_picture', b'2', 'b.png')

    assert paid_booking.personal_passport_picture['_id'] == second['_id']
    storage.delete.assert_called_once_with(first['publicId'])
    assert [d['_id'] for d in paid_booking.documents] == [first['_id'], second['_id']]


def test_replacement_survives_failed_delete(service, storage, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    service.attach_booking_document(caller, paid_booking.id, 'international_passport', b'1', 'a.pdf')
    storage.delete.side_effect = UpstreamFailure('bucket unavailable')

    second = service.attach_booking_document(caller, paid_booking.id, 'international_passport', b'2', 'b.pdf')
    assert paid_booking.international_passport['_id'] == second['_id']


def test_supporting_documents_append_in_order(service, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    first = service.attach_booking_document(caller, paid_booking.id, 'supporting_document', b'1', 'a.pdf', name='Bank statement')
    second = service.attach_booking_document(caller, paid_booking.id, 'supporting_document', b'2', 'b.pdf', name='Employer letter')

    assert [d['_id'] for d in paid_booking.supporting_documents] == [first['_id'], second['_id']]
    assert second['name'] == 'Employer letter'


def test_supporting_document_requires_name(service, storage, paid_booking, customer, as_caller):
    with pytest.raises(ValidationFailed) as excinfo:
        service.attach_booking_document(as_caller(customer), paid_booking.id, 'supporting_document', b'1', 'a.pdf', name='  ')

    assert excinfo.value.message == 'Document name is required for supporting documents'
    storage.upload.assert_not_called()


def test_unknown_document_type(service, paid_booking, customer, as_caller):
    with pytest.raises(ValidationFailed) as excinfo:
        service.attach_booking_document(as_caller(customer), paid_booking.id, 'visa', b'1', 'a.pdf')
    assert excinfo.value.message.startswith('Valid documentType is required')


def test_upload_failure_changes_nothing(service, storage, db, paid_booking, customer, as_caller):
    storage.upload.side_effect = UpstreamFailure('Failed to upload document: timeout')

    with pytest.raises(UpstreamFailure):
        service.attach_booking_document(as_caller(customer), paid_booking.id, 'international_passport', b'1', 'a.pdf')

    db.session.rollback()
    assert paid_booking.international_passport is None
    assert paid_booking.documents == []


def test_stranger_cannot_upload(service, paid_booking, other_customer, as_caller):
    with pytest.raises(Forbidden):
        service.attach_booking_document(as_caller(other_customer), paid_booking.id, 'international_passport', b'1', 'a.pdf')


def test_detach_by_id_and_public_id(service, storage, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    slot_doc = service.attach_booking_document(caller, paid_booking.id, 'international_passport', b'1', 'a.pdf')
    supporting = service.attach_booking_document(caller, paid_booking.id, 'supporting_document', b'2', 'b.pdf', name='Letter')

    service.detach_booking_document(caller, paid_booking.id, slot_doc['_id'])
    assert paid_booking.international_passport is None

    service.detach_booking_document(caller, paid_booking.id, supporting['publicId'])
    assert paid_booking.supporting_documents == []

    assert [call.args[0] for call in storage.delete.call_args_list] == [slot_doc['publicId'], supporting['publicId']]


def test_detach_unknown_document(service, paid_booking, customer, as_caller):
    with pytest.raises(NotFound) as excinfo:
        service.detach_booking_document(as_caller(customer), paid_booking.id, 'missing')
    assert excinfo.value.message == 'Document not found'


def test_detach_when_storage_delete_fails(service, storage, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    document = service.attach_booking_document(caller, paid_booking.id, 'international_passport', b'1', 'a.pdf')
    storage.delete.side_effect = UpstreamFailure('bucket unavailable')

    removed = service.detach_booking_document(caller, paid_booking.id, document['_id'])
    assert removed['_id'] == document['_id']
    assert paid_booking.international_passport is None


def test_documents_allowed_while_process_closed(service, db, paid_booking, customer, as_caller):
    paid_booking.application_closed = True
    db.session.commit()

    document = service.attach_booking_document(as_caller(customer), paid_booking.id, 'international_passport', b'1', 'a.pdf')
    assert paid_booking.international_passport['_id'] == document['_id']


# ----- HTTP -----

def test_upload_and_delete_over_http(app, client, auth_headers, paid_booking, customer):
    headers = auth_headers(customer)

    response = client.post(
        f'/api/bookings/{paid_booking.id}/user-documents',
        data={'file': (io.BytesIO(b'%PDF-1.4 test'), 'passport.pdf'), 'documentType': 'international_passport'},
        content_type='multipart/form-data',
        headers=headers
    )
    assert response.status_code == 201
    document = response.get_json()['data']
    stored_path = os.path.join(app.config['UPLOAD_FOLDER'], document['publicId'])
    assert os.path.exists(stored_path)
    assert document['url'] == f"/uploads/{document['publicId']}"

    response = client.get(f'/api/bookings/{paid_booking.id}/user-documents', headers=headers)
    data = response.get_json()['data']
    assert data['international_passport']['_id'] == document['_id']
    assert len(data['documents']) == 1

    response = client.delete(f"/api/bookings/{paid_booking.id}/user-documents/{document['_id']}", headers=headers)
    assert response.status_code == 200
    assert not os.path.exists(stored_path)


def test_upload_rejects_disallowed_extension(client, auth_headers, paid_booking, customer):
    response = client.post(
        f'/api/bookings/{paid_booking.id}/user-documents',
        data={'file': (io.BytesIO(b'MZ'), 'virus.exe'), 'documentType': 'international_passport'},
        content_type='multipart/form-data',
        headers=auth_headers(customer)
    )
    assert response.status_code == 422
    assert 'file' in response.get_json()['errors']


def test_upload_requires_login(client, paid_booking):
    response = client.post(f'/api/bookings/{paid_booking.id}/user-documents')
    assert response.status_code == 401


def test_stranger_upload_is_forbidden_before_file_checks(client, auth_headers, paid_booking, other_customer):
    response = client.post(
        f'/api/bookings/{paid_booking.id}/user-documents',
        data={'file': (io.BytesIO(b'MZ'), 'virus.exe'), 'documentType': 'international_passport'},
        content_type='multipart/form-data',
        headers=auth_headers(other_customer)
    )
    assert response.status_code == 403
