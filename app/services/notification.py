import logging

from flask import current_app

from app.utils.email import EmailService

logger = logging.getLogger(__name__)


class NotificationService:
    """Email notifications about visa applications. Never raises to the caller."""

    def __init__(self, config):
        self.admin_email = config.get('ADMIN_NOTIFICATION_EMAIL')
        self.frontend_url = (config.get('FRONTEND_URL') or '').rstrip('/')

    def _send_email(self, to_email, subject, body):
        try:
            return EmailService.send_email(to=to_email, subject=subject, body=body)
        except Exception as e:
            logger.error(f"Failed to send '{subject}' to {to_email}: {str(e)}")
            return False

    def notify_admin_application(
        self,
        applicant_type: str,
        booking_id: str,
        application_id: str,
        name: str,
        email: str,
        tour_title: str
    ):
        """Tell the admins a new application is waiting for review"""
        if applicant_type == 'user':
            link = f"{self.frontend_url}/admin/applications?bookingId={booking_id}"
            label = 'User'
        else:
            link = f"{self.frontend_url}/admin/applications/dependant/{application_id}"
            label = 'Dependant'

        subject = f"New {label} Application Submitted - {name}"
        body = (
            f"A new {label.lower()} application has been submitted and requires your review.\n\n"
            f"Customer Name: {name}\n"
            f"Customer Email: {email}\n"
            f"Tour: {tour_title}\n"
            f"Booking ID: {booking_id}\n\n"
            f"Review it here: {link}\n"
        )
        return self._send_email(self.admin_email, subject, body)

    def notify_application_status(
        self,
        to_email: str,
        customer_name: str,
        applicant_type: str,
        applicant_name: str,
        status: str,
        tour_title: str,
        booking_id: str
    ):
        """Tell the customer an admin changed an application's status"""
        readable = status.replace('_', ' ').title()
        subject = f"Application Status Update - {readable}"
        who = 'your application' if applicant_type == 'user' else f"the application for {applicant_name}"
        body = (
            f"Dear {customer_name},\n\n"
            f"The status of {who} for {tour_title} is now: {readable}.\n\n"
            f"View your booking: {self.frontend_url}/dashboard/bookings/{booking_id}\n"
        )
        return self._send_email(to_email, subject, body)


def create_notification_service():
    return NotificationService(current_app.config)
