import re
import pytest
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

from dateutil.relativedelta import relativedelta

from app.models import Booking, Dependant
from app.models.enums import ApplicationStatus
from app.services.applications import ApplicationService, generate_application_number
from app.services.errors import Forbidden, ProcessClosed, TerminalStateViolation, ValidationFailed

NOW = datetime(2026, 1, 31, 9, 30, tzinfo=timezone.utc)


def valid_form(**overrides):
    form = {
        'country_of_nationality': 'Kenya',
        'first_name': 'Amina',
        'last_name': 'Hassan',
        'gender': 'female',
        'date_of_birth': date(1990, 5, 15),
        'passport_type': 'ordinary',
        'passport_number': 'P1234567',
        'passport_issue_date': date(2022, 3, 1),
        'passport_expiry_date': date(2032, 3, 1),
        'residence_city': 'Nairobi',
    }
    form.update(overrides)
    return form


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def service(notifier):
    return ApplicationService(notifier=notifier, user_lookup=lambda _: None)


@pytest.fixture
def dependant(db, paid_booking, customer):
    dependant = Dependant(
        booking_id=paid_booking.id,
        user_id=customer.id,
        name='Sara Hassan',
        relationship='daughter',
        application_form_data={},
        supporting_documents=[],
        documents=[]
    )
    db.session.add(dependant)
    db.session.commit()
    return dependant


def test_application_number_format():
    number = generate_application_number(datetime(2026, 3, 9, tzinfo=timezone.utc))
    assert re.fullmatch(r'260309\d{6}', number)


def test_first_submission_marks_submitted_and_notifies(service, notifier, paid_booking, customer, as_caller):
    booking, is_new = service.submit_booking_application(as_caller(customer), paid_booking.id, valid_form(), now=NOW)

    assert is_new is True
    assert booking.application_form_submitted is True
    assert booking.application_form_submitted_at is not None
    assert booking.application_status == ApplicationStatus.SUBMITTED
    assert booking.application_number.startswith('260131')
    assert booking.application_form_data['date_of_birth'] == '1990-05-15'

    notifier.notify_admin_application.assert_called_once()
    kwargs = notifier.notify_admin_application.call_args.kwargs
    assert kwargs['applicant_type'] == 'user'
    assert kwargs['booking_id'] == paid_booking.id
    assert kwargs['tour_title'] == 'Istanbul Discovery'


def test_resubmission_replaces_form_and_keeps_number(service, notifier, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    booking, _ = service.submit_booking_application(caller, paid_booking.id, valid_form(), now=NOW)
    number = booking.application_number
    submitted_at = booking.application_form_submitted_at

    form = valid_form(first_name='Aminah')
    del form['residence_city']
    booking, is_new = service.submit_booking_application(caller, paid_booking.id, form, now=NOW + relativedelta(days=2))

    assert is_new is False
    assert booking.application_number == number
    assert booking.application_form_submitted_at == submitted_at
    assert booking.application_form_data['first_name'] == 'Aminah'
    assert 'residence_city' not in booking.application_form_data
    assert notifier.notify_admin_application.call_count == 1


def test_resubmission_does_not_reset_review_status(service, db, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    service.submit_booking_application(caller, paid_booking.id, valid_form(), now=NOW)
    paid_booking.application_status = ApplicationStatus.UNDER_REVIEW
    db.session.commit()

    booking, _ = service.submit_booking_application(caller, paid_booking.id, valid_form(), now=NOW)
    assert booking.application_status == ApplicationStatus.UNDER_REVIEW


def test_passport_expiring_exactly_six_months_out_is_accepted(service, paid_booking, customer, as_caller):
    expiry = NOW.date() + relativedelta(months=6)
    booking, _ = service.submit_booking_application(
        as_caller(customer), paid_booking.id, valid_form(passport_expiry_date=expiry), now=NOW
    )
    assert booking.application_form_data['passport_expiry_date'] == '2026-07-31'


def test_passport_expiring_one_day_short_is_rejected(service, paid_booking, customer, as_caller):
    expiry = NOW.date() + relativedelta(months=6) - relativedelta(days=1)
    with pytest.raises(ValidationFailed) as excinfo:
        service.submit_booking_application(
            as_caller(customer), paid_booking.id, valid_form(passport_expiry_date=expiry), now=NOW
        )

    assert excinfo.value.message == (
        'Passport must be valid at least 6 months from the visa application submission date'
    )
    assert 'passportExpiryDate' in excinfo.value.errors


def test_six_month_window_clamps_to_month_end(service, paid_booking, customer, as_caller):
    now = datetime(2026, 8, 31, tzinfo=timezone.utc)
    booking, _ = service.submit_booking_application(
        as_caller(customer), paid_booking.id, valid_form(passport_expiry_date=date(2027, 2, 28)), now=now
    )
    assert booking.application_form_submitted is True


def test_submission_without_expiry_is_allowed(service, paid_booking, customer, as_caller):
    form = valid_form()
    del form['passport_expiry_date']
    booking, is_new = service.submit_booking_application(as_caller(customer), paid_booking.id, form, now=NOW)
    assert is_new is True


def test_stranger_cannot_submit(service, paid_booking, other_customer, as_caller):
    with pytest.raises(Forbidden):
        service.submit_booking_application(as_caller(other_customer), paid_booking.id, valid_form(), now=NOW)


@pytest.mark.parametrize('status', [ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED])
def test_reviewed_application_is_locked(service, db, paid_booking, customer, as_caller, status):
    caller = as_caller(customer)
    service.submit_booking_application(caller, paid_booking.id, valid_form(), now=NOW)
    paid_booking.application_status = status
    db.session.commit()
    stored_form = dict(paid_booking.application_form_data)
    stored_at = paid_booking.application_form_submitted_at

    with pytest.raises(TerminalStateViolation) as excinfo:
        service.submit_booking_application(caller, paid_booking.id, valid_form(first_name='Changed'), now=NOW)
    assert excinfo.value.message == 'Application has already been reviewed. Cannot modify.'

    with pytest.raises(TerminalStateViolation):
        service.patch_booking_application(caller, paid_booking.id, {'first_name': 'X'})

    db.session.rollback()
    booking = db.session.get(Booking, paid_booking.id)
    assert booking.application_form_data == stored_form
    assert booking.application_form_submitted_at == stored_at
    assert booking.application_status == status


@pytest.mark.parametrize('status', [ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED])
def test_reviewed_dependant_application_is_locked(service, db, dependant, customer, as_caller, status):
    caller = as_caller(customer)
    service.submit_dependant_application(caller, dependant.id, valid_form(first_name='Sara'), now=NOW)
    dependant.application_status = status
    db.session.commit()
    stored_form = dict(dependant.application_form_data)
    stored_at = dependant.application_form_submitted_at

    with pytest.raises(TerminalStateViolation):
        service.submit_dependant_application(caller, dependant.id, valid_form(first_name='Changed'), now=NOW)

    with pytest.raises(TerminalStateViolation):
        service.patch_dependant_application(caller, dependant.id, {'profession': 'Student'})

    db.session.rollback()
    stored = db.session.get(Dependant, dependant.id)
    assert stored.application_form_data == stored_form
    assert stored.application_form_submitted_at == stored_at
    assert stored.application_status == status


def test_closed_process_blocks_customer_but_not_admin(service, db, paid_booking, customer, admin_user, as_caller):
    paid_booking.application_closed = True
    db.session.commit()

    with pytest.raises(ProcessClosed) as excinfo:
        service.submit_booking_application(as_caller(customer), paid_booking.id, valid_form(), now=NOW)
    assert excinfo.value.message == 'Application process has been closed. Cannot modify application.'

    booking, is_new = service.submit_booking_application(as_caller(admin_user), paid_booking.id, valid_form(), now=NOW)
    assert is_new is True


def test_closed_is_reported_before_reviewed(service, db, paid_booking, customer, as_caller):
    paid_booking.application_closed = True
    paid_booking.application_status = ApplicationStatus.ACCEPTED
    db.session.commit()

    with pytest.raises(ProcessClosed):
        service.patch_booking_application(as_caller(customer), paid_booking.id, {'first_name': 'X'})


def test_patch_updates_only_given_fields(service, paid_booking, customer, as_caller):
    caller = as_caller(customer)
    service.submit_booking_application(caller, paid_booking.id, valid_form(), now=NOW)

    booking = service.patch_booking_application(caller, paid_booking.id, {'profession': 'Engineer', 'residence_city': None})

    assert booking.application_form_data['profession'] == 'Engineer'
    assert booking.application_form_data['first_name'] == 'Amina'
    assert 'residence_city' not in booking.application_form_data
    assert booking.application_status == ApplicationStatus.SUBMITTED


def test_patch_before_submission_keeps_pending(service, paid_booking, customer, as_caller):
    booking = service.patch_booking_application(as_caller(customer), paid_booking.id, {'first_name': 'Amina'})
    assert booking.application_form_submitted is False
    assert booking.application_status == ApplicationStatus.PENDING


def test_dependant_submission_notifies_and_syncs_basics(service, notifier, dependant, customer, as_caller):
    result, is_new = service.submit_dependant_application(
        as_caller(customer), dependant.id, valid_form(passport_number='D7654321'), now=NOW
    )

    assert is_new is True
    assert result.passport_number == 'D7654321'
    assert result.date_of_birth == date(1990, 5, 15)
    assert result.application_status == ApplicationStatus.SUBMITTED
    kwargs = notifier.notify_admin_application.call_args.kwargs
    assert kwargs['applicant_type'] == 'dependant'
    assert kwargs['application_id'] == dependant.id


def test_dependant_application_follows_booking_gate(service, db, dependant, paid_booking, customer, as_caller):
    paid_booking.application_closed = True
    db.session.commit()

    with pytest.raises(ProcessClosed):
        service.patch_dependant_application(as_caller(customer), dependant.id, {'profession': 'Student'})


def test_review_requires_known_status(service, paid_booking, admin_user, as_caller):
    with pytest.raises(ValidationFailed) as excinfo:
        service.review_booking_application(as_caller(admin_user), paid_booking.id, 'approved')
    assert excinfo.value.message.startswith('Valid status is required. Must be one of: pending, submitted')


def test_review_requires_admin(service, paid_booking, customer, as_caller):
    with pytest.raises(Forbidden):
        service.review_booking_application(as_caller(customer), paid_booking.id, 'accepted')


def test_review_stamps_reviewer_and_notifies_customer(service, notifier, paid_booking, admin_user, as_caller):
    booking = service.review_booking_application(as_caller(admin_user), paid_booking.id, 'accepted', now=NOW)

    assert booking.application_status == ApplicationStatus.ACCEPTED
    assert booking.application_reviewed_by == admin_user.id
    assert booking.application_reviewed_at is not None
    kwargs = notifier.notify_application_status.call_args.kwargs
    assert kwargs['to_email'] == paid_booking.customer_email
    assert kwargs['status'] == 'accepted'


def test_review_of_dependant(service, notifier, dependant, admin_user, as_caller):
    result = service.review_dependant_application(as_caller(admin_user), dependant.id, 'rejected', now=NOW)

    assert result.application_status == ApplicationStatus.REJECTED
    assert notifier.notify_application_status.call_args.kwargs['applicant_name'] == 'Sara Hassan'


def test_notification_failure_does_not_fail_submission(service, notifier, paid_booking, customer, as_caller):
    notifier.notify_admin_application.side_effect = RuntimeError('smtp down')

    booking, is_new = service.submit_booking_application(as_caller(customer), paid_booking.id, valid_form(), now=NOW)
    assert is_new is True
    assert booking.application_form_submitted is True


def test_close_and_reopen(service, paid_booking, admin_user, as_caller):
    caller = as_caller(admin_user)

    booking = service.set_application_closed(caller, paid_booking.id, 'close', now=NOW)
    assert booking.application_closed is True
    assert booking.application_closed_by == admin_user.id
    assert booking.application_closed_at is not None

    booking = service.set_application_closed(caller, paid_booking.id, 'reopen')
    assert booking.application_closed is False
    assert booking.application_closed_at is None
    assert booking.application_closed_by is None


def test_close_rejects_unknown_action(service, paid_booking, admin_user, as_caller):
    with pytest.raises(ValidationFailed) as excinfo:
        service.set_application_closed(as_caller(admin_user), paid_booking.id, 'lock')
    assert excinfo.value.message == 'Invalid action. Use "close" or "reopen"'
