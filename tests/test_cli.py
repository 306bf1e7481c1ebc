from app.models import Booking, Tour, User
from app.models.enums import UserRole


def test_init_seeds_sample_data(runner):
    result = runner.invoke(args=['db-manage', 'init'])

    assert result.exit_code == 0, result.output
    assert User.query.filter_by(role=UserRole.ADMIN).count() == 1
    assert Tour.query.count() == 2
    assert Booking.query.count() == 2


def test_create_admin_promotes_existing_user(runner, customer):
    result = runner.invoke(args=['db-manage', 'create-admin', customer.email, '--password', 'NewPass123'])

    assert result.exit_code == 0, result.output
    user = User.query.filter_by(email=customer.email).first()
    assert user.role == UserRole.ADMIN
    assert user.check_password('NewPass123')
