"""
Database Initialization Script
Creates tables and initializes the database with sample data for testing
"""

from app.extensions import db


def clear_database():
    """Drop all tables and recreate them"""
    print("🗑️  Dropping all tables...")
    db.drop_all()
    print("✅ Tables dropped successfully")

    print("📋 Creating tables...")
    db.create_all()
    print("✅ Tables created successfully")


def init_database(with_sample_data=True):
    """
    Initialize the database with tables and optionally sample data

    Args:
        with_sample_data (bool): Whether to populate with sample data
    """
    print("🚀 Initializing database...")

    print("📋 Creating tables...")
    db.create_all()
    print("✅ Tables created successfully")

    if with_sample_data:
        print("\n📦 Creating sample data...")
        from .sample_data import create_sample_users, create_sample_tours, create_sample_bookings

        # Create data in order (respecting foreign keys)
        users = create_sample_users()
        tours = create_sample_tours()
        bookings = create_sample_bookings(users, tours)

        print(f"\n✅ Database initialized successfully!")
        print(f"   - Users: {len(users)}")
        print(f"   - Tours: {len(tours)}")
        print(f"   - Bookings: {len(bookings)}")

        print("\n🔑 Test User Credentials:")
        print("   Email: amina.hassan@example.com")
        print("   Password: password123")
        print("\n   Email: admin@example.com")
        print("   Password: admin1234")
    else:
        print("✅ Database tables created (no sample data)")

    return True


def reset_database():
    """Complete database reset - drop, create, and populate"""
    print("⚠️  RESETTING DATABASE - This will delete all data!")
    db.drop_all()
    init_database(with_sample_data=True)
    print("\n✅ Database reset complete!")
