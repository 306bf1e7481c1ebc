"""
Booking payments through Stripe payment intents.

A booking is charged its total in a single intent. The intent id is kept on
the booking so the customer can confirm without echoing it back.
"""

import logging
from typing import Dict, Optional
import stripe
from decimal import Decimal
from flask import current_app

logger = logging.getLogger(__name__)

PAYMENT_CURRENCY = 'usd'
PENDING_INTENT_STATUSES = ('processing', 'requires_action', 'requires_capture')


class PaymentServiceError(Exception):
    """Stripe could not be reached or returned an intent that does not match the booking"""
    pass


def to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1')))


class PaymentService:

    def __init__(self, config):
        self.currency = (config.get('PAYMENT_CURRENCY') or PAYMENT_CURRENCY).lower()
        secret_key = config.get('STRIPE_SECRET_KEY')
        if secret_key:
            stripe.api_key = secret_key
        else:
            logger.warning("Stripe secret key not configured")

    def start_booking_payment(self, booking) -> Dict:
        """
        Open a payment intent for the booking total

        Returns:
            Dict with the intent id and the client secret the frontend needs
        """
        params = {
            'amount': to_minor_units(booking.total_amount),
            'currency': self.currency,
            'automatic_payment_methods': {'enabled': True},
            'metadata': {
                'booking_id': booking.id,
                'tour_id': booking.tour_id,
                'travelers': booking.number_of_travelers,
            },
            'description': f"{booking.tour.title if booking.tour else 'Tour booking'} x{booking.number_of_travelers}",
        }
        if booking.customer_email:
            params['receipt_email'] = booking.customer_email

        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe error opening payment for booking {booking.id}: {str(e)}")
            raise PaymentServiceError(f"Failed to create payment intent: {str(e)}")

        logger.info(f"Opened payment intent {intent.id} for booking {booking.id}")
        return {
            'paymentIntentId': intent.id,
            'clientSecret': intent.client_secret,
            'amount': float(booking.total_amount),
            'currency': self.currency,
            'status': intent.status,
        }

    def verify_booking_payment(self, booking, payment_intent_id: Optional[str] = None) -> Dict:
        """
        Look the intent up and check it paid this booking in full.

        Raises PaymentServiceError when Stripe fails or when the intent's
        amount, currency or booking reference differ from the booking.
        """
        payment_intent_id = payment_intent_id or booking.payment_intent_id
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe error checking payment {payment_intent_id}: {str(e)}")
            raise PaymentServiceError(f"Failed to confirm payment: {str(e)}")

        expected = to_minor_units(booking.total_amount)
        if intent.amount != expected:
            raise PaymentServiceError(f"Amount mismatch: expected {expected}, got {intent.amount}")
        if intent.currency != self.currency:
            raise PaymentServiceError(f"Currency mismatch: expected {self.currency}, got {intent.currency}")

        booking_ref = (intent.metadata or {}).get('booking_id')
        if booking_ref and booking_ref != booking.id:
            raise PaymentServiceError('Payment intent belongs to another booking')

        if intent.status == 'succeeded':
            logger.info(f"Payment {intent.id} confirmed for booking {booking.id}")
            return {'paid': True, 'status': intent.status, 'paymentIntentId': intent.id}

        if intent.status in PENDING_INTENT_STATUSES:
            message = 'Payment is still processing'
        else:
            message = 'Payment failed'
        return {'paid': False, 'status': intent.status, 'paymentIntentId': intent.id, 'message': message}


def create_payment_service():
    return PaymentService(current_app.config)
