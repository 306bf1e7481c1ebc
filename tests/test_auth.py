from flask_jwt_extended import decode_token

from app.models import User


def register(client, **overrides):
    body = {
        'fullName': 'David Ochieng',
        'email': 'David@Test.com',
        'password': 'SecurePass123',
        'confirmPassword': 'SecurePass123',
    }
    body.update(overrides)
    return client.post('/api/auth/register', json=body)


def test_register_creates_customer(client, db):
    response = register(client)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['user']['email'] == 'david@test.com'
    assert data['user']['role'] == 'customer'

    claims = decode_token(data['tokens']['accessToken'])
    assert claims['sub'] == data['user']['id']
    assert claims['email'] == 'david@test.com'
    assert claims['role'] == 'customer'


def test_register_duplicate_email(client, customer):
    response = register(client, email=customer.email)
    assert response.status_code == 409


def test_register_validation(client):
    response = register(client, password='short', confirmPassword='other')

    assert response.status_code == 422
    assert set(response.get_json()['errors']) == {'password', 'confirmPassword'}


def test_login_and_me(client, customer):
    response = client.post('/api/auth/login', json={'email': 'AMINA@test.com', 'password': 'Password123'})
    assert response.status_code == 200
    token = response.get_json()['data']['tokens']['accessToken']

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert response.get_json()['data']['user']['id'] == customer.id


def test_login_wrong_password(client, customer):
    response = client.post('/api/auth/login', json={'email': customer.email, 'password': 'nope'})
    assert response.status_code == 401
    assert response.get_json()['code'] == 'unauthenticated'


def test_login_deactivated(client, db, customer):
    customer.is_active = False
    db.session.commit()

    response = client.post('/api/auth/login', json={'email': customer.email, 'password': 'Password123'})
    assert response.status_code == 403


def test_me_requires_token(client):
    response = client.get('/api/auth/me')
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Please login to continue'


def test_registration_is_audited(client, db):
    from app.models import AuditLog

    register(client)
    user = User.query.filter_by(email='david@test.com').first()
    assert AuditLog.query.filter_by(user_id=user.id, action='user_registered').count() == 1
