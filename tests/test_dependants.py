import pytest
from datetime import date
from unittest.mock import MagicMock

from app.models import Dependant, UserDependantProfile
from app.services.access import can_access_dependant
from app.services.dependants import DependantRoster, remaining_slots
from app.services.documents import DocumentSlotManager
from app.services.errors import Forbidden, ProcessClosed, ValidationFailed


@pytest.fixture
def storage():
    return MagicMock()


@pytest.fixture
def roster(storage):
    return DependantRoster(DocumentSlotManager(storage), user_lookup=lambda _: None)


@pytest.fixture
def profile(db, customer):
    profile = UserDependantProfile(
        user_id=customer.id,
        name='Sara Hassan',
        relationship='daughter',
        date_of_birth=date(2015, 4, 2),
        passport_number='D1111111',
        first_name='Sara',
        last_name='Hassan',
        gender='female'
    )
    db.session.add(profile)
    db.session.commit()
    return profile


def test_add_dependant(roster, paid_booking, customer, as_caller):
    dependant = roster.add_dependant(
        as_caller(customer), paid_booking.id,
        {'name': 'Omar Hassan', 'relationship': 'son', 'date_of_birth': date(2012, 1, 9)}
    )

    assert dependant.booking_id == paid_booking.id
    assert dependant.user_id == customer.id
    assert dependant.name == 'Omar Hassan'
    assert dependant.application_form_data == {'date_of_birth': '2012-01-09'}
    assert dependant.application_form_submitted is False


def test_dependants_require_payment(roster, tour, customer, booking_factory, as_caller):
    booking = booking_factory(tour, customer, paid=False)

    with pytest.raises(ValidationFailed) as excinfo:
        roster.add_dependant(as_caller(customer), booking.id, {'name': 'Omar', 'relationship': 'son'})
    assert excinfo.value.message == 'Dependants can only be added after payment is completed'


def test_name_and_relationship_required(roster, paid_booking, customer, as_caller):
    with pytest.raises(ValidationFailed) as excinfo:
        roster.add_dependant(as_caller(customer), paid_booking.id, {'name': 'Omar'})

    assert excinfo.value.message == 'Name and relationship are required'
    assert set(excinfo.value.errors) == {'relationship'}


def test_capacity_is_travelers_minus_main_applicant(roster, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    roster.add_dependant(caller, paid_booking.id, {'name': 'Omar', 'relationship': 'son'})
    roster.add_dependant(caller, paid_booking.id, {'name': 'Sara', 'relationship': 'daughter'})

    with pytest.raises(ValidationFailed) as excinfo:
        roster.add_dependant(caller, paid_booking.id, {'name': 'Zara', 'relationship': 'daughter'})

    assert excinfo.value.message == (
        'Cannot add more dependants. This booking is for 3 traveler(s). You have 0 slot(s) remaining.'
    )
    assert paid_booking.dependants.count() == 2


def test_single_traveler_booking_takes_no_dependants(roster, tour, customer, booking_factory, as_caller):
    booking = booking_factory(tour, customer, travelers=1)

    with pytest.raises(ValidationFailed) as excinfo:
        roster.add_dependant(as_caller(customer), booking.id, {'name': 'Omar', 'relationship': 'son'})
    assert 'This booking is for 1 traveler(s). You have 0 slot(s) remaining.' in excinfo.value.message


def test_remaining_slots_never_negative(paid_booking):
    assert remaining_slots(paid_booking, 0) == 2
    assert remaining_slots(paid_booking, 5) == 0


def test_closed_process_blocks_customer_add(roster, db, paid_booking, customer, admin_user, as_caller):
    paid_booking.application_closed = True
    db.session.commit()

    with pytest.raises(ProcessClosed) as excinfo:
        roster.add_dependant(as_caller(customer), paid_booking.id, {'name': 'Omar', 'relationship': 'son'})
    assert excinfo.value.message == 'Application process has been closed. Cannot add dependants.'

    dependant = roster.add_dependant(as_caller(admin_user), paid_booking.id, {'name': 'Omar', 'relationship': 'son'})
    assert dependant.user_id == customer.id


def test_add_from_profile_with_overrides(roster, paid_booking, customer, profile, as_caller):
    dependant = roster.add_dependant(
        as_caller(customer), paid_booking.id, {'passport_number': 'D2222222'}, profile_id=profile.id
    )

    assert dependant.name == 'Sara Hassan'
    assert dependant.relationship == 'daughter'
    assert dependant.passport_number == 'D2222222'
    assert dependant.application_form_data['first_name'] == 'Sara'
    assert dependant.application_form_data['gender'] == 'female'
    assert dependant.application_form_data['passport_number'] == 'D2222222'


def test_profile_of_another_user_is_rejected(roster, tour, other_customer, profile, booking_factory, as_caller):
    booking = booking_factory(tour, other_customer)

    with pytest.raises(Forbidden):
        roster.add_dependant(as_caller(other_customer), booking.id, {}, profile_id=profile.id)


def test_email_owned_booking_assigns_caller(roster, tour, customer, booking_factory, as_caller):
    booking = booking_factory(tour, None, email=customer.email)

    dependant = roster.add_dependant(as_caller(customer), booking.id, {'name': 'Omar', 'relationship': 'son'})
    assert dependant.user_id == customer.id


def test_email_fallback_caller_owns_added_dependant(roster, tour, customer, other_customer, booking_factory, as_caller):
    booking = booking_factory(tour, other_customer, email=customer.email)
    caller = as_caller(customer)

    dependant = roster.add_dependant(caller, booking.id, {'name': 'Omar', 'relationship': 'son'})

    assert dependant.user_id == customer.id
    assert can_access_dependant(caller, dependant) is True
    assert roster.get_dependant(caller, dependant.id).id == dependant.id


def test_admin_adds_to_guest_booking_for_email_account(roster, tour, customer, admin_user, booking_factory, as_caller):
    booking = booking_factory(tour, None, email=customer.email.upper())

    dependant = roster.add_dependant(as_caller(admin_user), booking.id, {'name': 'Omar', 'relationship': 'son'})

    assert dependant.user_id == customer.id
    assert can_access_dependant(as_caller(customer), dependant) is True


def test_admin_keeps_dependant_on_unregistered_guest_booking(roster, tour, admin_user, booking_factory, as_caller):
    booking = booking_factory(tour, None, email='walkin@test.com')

    dependant = roster.add_dependant(as_caller(admin_user), booking.id, {'name': 'Omar', 'relationship': 'son'})
    assert dependant.user_id == admin_user.id


def test_remove_dependant_purges_documents(roster, storage, db, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    dependant = roster.add_dependant(caller, paid_booking.id, {'name': 'Omar', 'relationship': 'son'})
    passport = {'_id': 'a1', 'publicId': 'bookings/x/dependants/y/a1.pdf'}
    letter = {'_id': 'b2', 'publicId': 'bookings/x/dependants/y/b2.pdf'}
    dependant.international_passport = passport
    dependant.supporting_documents = [letter]
    dependant.documents = [passport, letter]
    db.session.commit()
    dependant_id = dependant.id

    public_ids = roster.remove_dependant(caller, dependant_id)

    assert public_ids == [passport['publicId'], letter['publicId']]
    assert db.session.get(Dependant, dependant_id) is None
    assert storage.delete.call_count == 2


def test_remove_blocked_when_closed(roster, db, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    dependant = roster.add_dependant(caller, paid_booking.id, {'name': 'Omar', 'relationship': 'son'})
    paid_booking.application_closed = True
    db.session.commit()

    with pytest.raises(ProcessClosed) as excinfo:
        roster.remove_dependant(caller, dependant.id)
    assert excinfo.value.message == 'Application process has been closed. Cannot remove dependants.'


# ----- HTTP -----

def test_add_and_list_dependants_over_http(client, auth_headers, paid_booking, customer):
    headers = auth_headers(customer)

    response = client.post(
        f'/api/bookings/{paid_booking.id}/dependants',
        json={'name': 'Omar Hassan', 'relationship': 'son', 'dateOfBirth': '2012-01-09'},
        headers=headers
    )
    assert response.status_code == 201
    assert response.get_json()['data']['date_of_birth'] == '2012-01-09'

    response = client.get(f'/api/bookings/{paid_booking.id}/dependants', headers=headers)
    data = response.get_json()['data']
    assert len(data['dependants']) == 1
    assert data['remaining_slots'] == 1


def test_capacity_error_over_http(client, auth_headers, tour, customer, booking_factory):
    booking = booking_factory(tour, customer, travelers=1)

    response = client.post(
        f'/api/bookings/{booking.id}/dependants',
        json={'name': 'Omar', 'relationship': 'son'},
        headers=auth_headers(customer)
    )
    body = response.get_json()
    assert response.status_code == 400
    assert body['code'] == 'validation_failed'
    assert 'You have 0 slot(s) remaining.' in body['message']


def test_other_customer_cannot_list_or_add(client, auth_headers, paid_booking, other_customer):
    response = client.get(f'/api/bookings/{paid_booking.id}/dependants', headers=auth_headers(other_customer))
    assert response.status_code == 403
    assert response.get_json()['code'] == 'forbidden'

    response = client.post(
        f'/api/bookings/{paid_booking.id}/dependants',
        json={'dateOfBirth': 'not-a-date'},
        headers=auth_headers(other_customer)
    )
    assert response.status_code == 403


def test_delete_dependant_over_http(client, auth_headers, paid_booking, customer):
    headers = auth_headers(customer)
    created = client.post(
        f'/api/bookings/{paid_booking.id}/dependants',
        json={'name': 'Omar', 'relationship': 'son'},
        headers=headers
    ).get_json()['data']

    response = client.delete(f"/api/dependants/{created['id']}", headers=headers)
    assert response.status_code == 200

    response = client.get(f"/api/dependants/{created['id']}", headers=headers)
    assert response.status_code == 404
