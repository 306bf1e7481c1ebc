import pytest
from unittest.mock import patch, MagicMock
from app.services.notification import NotificationService
from app.utils.email import EmailService

@pytest.fixture
def notification_service(app):
    return NotificationService(app.config)

def test_admin_notification_for_main_applicant(notification_service):
    with patch.object(notification_service, '_send_email', return_value=True) as mock_send:
        notification_service.notify_admin_application(
            applicant_type='user',
            booking_id='bk_123',
            application_id='bk_123',
            name='Amina Hassan',
            email='amina@test.com',
            tour_title='Istanbul Discovery'
        )

        mock_send.assert_called_once()
        to_email, subject, body = mock_send.call_args.args
        assert to_email == 'applications@test.com'
        assert subject == 'New User Application Submitted - Amina Hassan'
        assert 'http://frontend.test/admin/applications?bookingId=bk_123' in body
        assert 'Istanbul Discovery' in body

def test_admin_notification_for_dependant(notification_service):
    with patch.object(notification_service, '_send_email', return_value=True) as mock_send:
        notification_service.notify_admin_application(
            applicant_type='dependant',
            booking_id='bk_123',
            application_id='dep_9',
            name='Sara Hassan',
            email='amina@test.com',
            tour_title='Istanbul Discovery'
        )

        _, subject, body = mock_send.call_args.args
        assert subject == 'New Dependant Application Submitted - Sara Hassan'
        assert '/admin/applications/dependant/dep_9' in body

def test_status_notification(notification_service):
    with patch.object(notification_service, '_send_email', return_value=True) as mock_send:
        notification_service.notify_application_status(
            to_email='amina@test.com',
            customer_name='Amina Hassan',
            applicant_type='dependant',
            applicant_name='Sara Hassan',
            status='under_review',
            tour_title='Istanbul Discovery',
            booking_id='bk_123'
        )

        to_email, subject, body = mock_send.call_args.args
        assert to_email == 'amina@test.com'
        assert subject == 'Application Status Update - Under Review'
        assert 'the application for Sara Hassan' in body

def test_send_failure_is_swallowed(notification_service):
    with patch('app.services.notification.EmailService.send_email', side_effect=OSError('connection refused')):
        assert notification_service._send_email('a@test.com', 'Subject', 'Body') is False

def test_email_skipped_when_not_configured(app):
    assert EmailService.send_email(to='a@test.com', subject='Hi', body='Body') is False

def test_email_sent_over_smtp(app):
    app.config.update(MAIL_SERVER='smtp.test', MAIL_USERNAME='mailer', MAIL_PASSWORD='secret')

    with patch('app.utils.email.smtplib.SMTP') as mock_smtp:
        smtp = MagicMock()
        mock_smtp.return_value.__enter__.return_value = smtp

        assert EmailService.send_email(to='a@test.com', subject='Hi', body='Body') is True

        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with('mailer', 'secret')
        message = smtp.send_message.call_args.args[0]
        assert message['To'] == 'a@test.com'
        assert message['Subject'] == 'Hi'
