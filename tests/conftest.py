import pytest
from decimal import Decimal
from flask_jwt_extended import create_access_token

from app import create_app
from app.extensions import db as _db
from app.models import User, Tour, Booking
from app.models.enums import UserRole, PaymentStatus, BookingStatus
from app.services.access import Caller
from config import Config

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'test-secret-key-that-is-long-enough-for-hs256'
    # API Keys for testing
    STRIPE_SECRET_KEY = "sk_test_123"
    STRIPE_PUBLISHABLE_KEY = "pk_test_123"
    GCS_BUCKET_NAME = ''
    MAIL_SERVER = ''
    FRONTEND_URL = 'http://frontend.test'
    ADMIN_NOTIFICATION_EMAIL = 'applications@test.com'
    PASSPORT_MIN_VALIDITY_MONTHS = 6

@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig)
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def runner(app):
    return app.test_cli_runner()

@pytest.fixture
def db(app):
    return _db


def _make_user(email, first_name, role=UserRole.CUSTOMER):
    user = User(email=email, first_name=first_name, last_name='Tester', role=role, is_active=True)
    user.set_password('Password123')
    _db.session.add(user)
    _db.session.commit()
    return user

@pytest.fixture
def customer(db):
    return _make_user('amina@test.com', 'Amina')

@pytest.fixture
def other_customer(db):
    return _make_user('brian@test.com', 'Brian')

@pytest.fixture
def admin_user(db):
    return _make_user('admin@test.com', 'Admin', role=UserRole.ADMIN)


def caller_for(user, with_email=True):
    return Caller(user.id, email=user.email if with_email else None, role=user.role)

@pytest.fixture
def auth_headers(app):
    """Build Authorization headers for a user"""
    def _headers(user, with_email=True):
        claims = {'role': user.role.value}
        if with_email:
            claims['email'] = user.email
        token = create_access_token(identity=user.id, additional_claims=claims)
        return {'Authorization': f'Bearer {token}'}
    return _headers

@pytest.fixture
def tour(db):
    tour = Tour(
        title='Istanbul Discovery',
        category='Cultural',
        package_type='standard',
        price_per_person=Decimal('1000.00'),
        status='published'
    )
    db.session.add(tour)
    db.session.commit()
    return tour


def make_booking(tour, user=None, travelers=3, paid=True, email=None):
    booking = Booking(
        tour_id=tour.id,
        user_id=user.id if user else None,
        customer_name=user.get_full_name() if user else 'Walk In',
        customer_email=email or (user.email if user else 'walkin@test.com'),
        customer_phone='+254700000001',
        number_of_travelers=travelers,
        total_amount=tour.price_per_person * travelers,
        payment_status=PaymentStatus.PAID if paid else PaymentStatus.PENDING,
        booking_status=BookingStatus.CONFIRMED if paid else BookingStatus.PENDING,
        application_form_data={},
        supporting_documents=[],
        documents=[]
    )
    _db.session.add(booking)
    _db.session.commit()
    return booking

@pytest.fixture
def paid_booking(customer, tour):
    return make_booking(tour, customer, travelers=3)

@pytest.fixture
def booking_factory(db):
    return make_booking

@pytest.fixture
def as_caller():
    return caller_for
