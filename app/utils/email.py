import smtplib
from email.message import EmailMessage
from typing import List

from flask import current_app


class EmailService:
    """Email sending over SMTP"""

    @staticmethod
    def is_configured() -> bool:
        return bool(current_app.config.get('MAIL_SERVER'))

    @staticmethod
    def send_email(
        to: str,
        subject: str,
        body: str,
        html: str = None,
        cc: List[str] = None
    ) -> bool:
        """
        Send an email through the configured SMTP server.

        Returns False without sending when mail is not configured. SMTP
        errors propagate to the caller.
        """
        config = current_app.config
        if not EmailService.is_configured():
            current_app.logger.info(f"Email not configured, skipping '{subject}' to {to}")
            return False

        msg = EmailMessage()
        msg['From'] = config['MAIL_DEFAULT_SENDER']
        msg['To'] = to
        msg['Subject'] = subject
        if cc:
            msg['Cc'] = ', '.join(cc)
        msg.set_content(body)
        if html:
            msg.add_alternative(html, subtype='html')

        with smtplib.SMTP(config['MAIL_SERVER'], config['MAIL_PORT'], timeout=10) as smtp:
            if config.get('MAIL_USE_TLS'):
                smtp.starttls()
            if config.get('MAIL_USERNAME'):
                smtp.login(config['MAIL_USERNAME'], config['MAIL_PASSWORD'])
            smtp.send_message(msg)

        current_app.logger.info(f"Email sent to {to}: {subject}")
        return True
