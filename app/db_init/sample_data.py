"""
Sample Data Generation
Creates realistic sample data for testing and development
"""

from app.extensions import db
from app.models import User, Tour, Booking
from app.models.enums import UserRole, BookingStatus, PaymentStatus
from datetime import datetime, timedelta, timezone
from decimal import Decimal


SAMPLE_TOURS = [
    {
        'title': 'Istanbul & Cappadocia Discovery',
        'category': 'Cultural',
        'package_type': 'standard',
        'description': 'Nine days across Istanbul and the valleys of Cappadocia.',
        'departure': 'Nairobi (NBO)',
        'accommodation': '4-star hotels, cave hotel in Goreme',
        'dates': 'March - November',
        'price_per_person': Decimal('1850.00'),
        'itinerary': [
            {'day': 1, 'title': 'Arrival in Istanbul', 'description': 'Transfer and welcome dinner'},
            {'day': 4, 'title': 'Flight to Cappadocia', 'description': 'Sunset at Uchisar castle'},
        ],
        'inclusions': ['Return flights', 'Visa processing', 'Breakfast daily'],
        'exclusions': ['Travel insurance', 'Balloon ride'],
    },
    {
        'title': 'Umrah Premium Package',
        'category': 'Pilgrimage',
        'package_type': 'umrah',
        'description': 'Fourteen nights split between Makkah and Madinah.',
        'departure': 'Dar es Salaam (DAR)',
        'accommodation': '5-star hotels near the Haram',
        'dates': 'Year round',
        'price_per_person': Decimal('2400.00'),
        'itinerary': [
            {'day': 1, 'title': 'Arrival in Jeddah', 'description': 'Transfer to Makkah'},
            {'day': 8, 'title': 'Madinah', 'description': 'Train to Madinah'},
        ],
        'inclusions': ['Umrah visa', 'Flights', 'Ground transport'],
        'exclusions': ['Personal expenses'],
    },
]


def create_sample_users():
    """Create an admin and two customers"""
    print("   Creating users...")

    users = []
    for email, password, first_name, last_name, role in (
        ('admin@example.com', 'admin1234', 'Site', 'Admin', UserRole.ADMIN),
        ('amina.hassan@example.com', 'password123', 'Amina', 'Hassan', UserRole.CUSTOMER),
        ('david.ochieng@example.com', 'password123', 'David', 'Ochieng', UserRole.CUSTOMER),
    ):
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            phone='+254700000000',
            role=role,
            is_active=True
        )
        user.set_password(password)
        users.append(user)

    db.session.add_all(users)
    db.session.commit()
    print(f"   ✅ Created {len(users)} users")
    return users


def create_sample_tours():
    """Create the sample tour catalogue"""
    print("   Creating tours...")

    tours = [Tour(status='published', gallery=[], **data) for data in SAMPLE_TOURS]
    db.session.add_all(tours)
    db.session.commit()
    print(f"   ✅ Created {len(tours)} tours")
    return tours


def create_sample_bookings(users, tours):
    """One paid family booking and one pending booking"""
    print("   Creating bookings...")

    customer = next(user for user in users if user.role == UserRole.CUSTOMER)
    now = datetime.now(timezone.utc)

    bookings = [
        Booking(
            tour_id=tours[0].id,
            user_id=customer.id,
            package_type=tours[0].package_type,
            customer_name=customer.get_full_name(),
            customer_email=customer.email,
            customer_phone=customer.phone,
            number_of_travelers=3,
            total_amount=tours[0].price_per_person * 3,
            payment_status=PaymentStatus.PAID,
            booking_status=BookingStatus.CONFIRMED,
            booking_date=now + timedelta(days=60),
            application_form_data={},
            supporting_documents=[],
            documents=[]
        ),
        Booking(
            tour_id=tours[1].id,
            user_id=customer.id,
            package_type=tours[1].package_type,
            customer_name=customer.get_full_name(),
            customer_email=customer.email,
            customer_phone=customer.phone,
            number_of_travelers=1,
            total_amount=tours[1].price_per_person,
            payment_status=PaymentStatus.PENDING,
            booking_status=BookingStatus.PENDING,
            booking_date=now + timedelta(days=120),
            application_form_data={},
            supporting_documents=[],
            documents=[]
        ),
    ]

    db.session.add_all(bookings)
    db.session.commit()
    print(f"   ✅ Created {len(bookings)} bookings")
    return bookings
