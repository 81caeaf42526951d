"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from app.models.college import College

fake = Faker()


class TestUserRegistration:
    """Test user registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient):
        """Test successful user registration"""
        user_data = {
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 201
        data = response.json()
        assert data['email'] == user_data['email']
        assert data['full_name'] == user_data['full_name']
        assert data['role'] == 'student'
        assert data['entity_id'] is None
        assert 'id' in data
        assert 'hashed_password' not in data  # Should not expose password

    @pytest.mark.asyncio
    async def test_register_ignores_requested_role(self, client: AsyncClient):
        """Self-registration never grants staff roles"""
        user_data = {
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
            'role': 'super_admin'
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 201
        assert response.json()['role'] == 'student'

    @pytest.mark.asyncio
    async def test_register_with_college(self, client: AsyncClient, db_session):
        college = College(name='Model Engineering College')
        db_session.add(college)
        await db_session.commit()

        response = await client.post('/api/v1/auth/register', json={
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
            'college_id': college.id,
        })

        assert response.status_code == 201
        assert response.json()['college_id'] == college.id

    @pytest.mark.asyncio
    async def test_register_unknown_college(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
            'college_id': '00000000-0000-0000-0000-000000000000',
        })

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, test_user):
        """Test registration with duplicate email fails"""
        user_data = {
            'email': test_user.email,  # Same email as existing user
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 409
        body = response.json()
        assert body['success'] is False
        assert 'already registered' in body['error']['message'].lower()

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, client: AsyncClient):
        """Test registration with invalid email"""
        user_data = {
            'email': 'not-an-email',
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 422  # Validation error
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, client: AsyncClient):
        """Test registration with missing required fields"""
        user_data = {
            'email': fake.email()
            # Missing password and full_name
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_register_with_short_password(self, client: AsyncClient):
        """Test registration with too short password"""
        user_data = {
            'email': fake.email(),
            'password': '123',  # Too short
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 422


class TestUserLogin:
    """Test login endpoint"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': 'testpassword123'
        })

        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['access_token']
        assert data['user']['id'] == test_user.id

    @pytest.mark.asyncio
    async def test_login_token_works(self, client: AsyncClient, test_user):
        login = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': 'testpassword123'
        })
        token = login.json()['access_token']

        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200
        assert response.json()['email'] == test_user.email

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': 'wrongpassword'
        })

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'UNAUTHENTICATED'

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/login', json={
            'email': fake.email(),
            'password': 'whatever123'
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, make_user):
        user = await make_user(is_active=False)
        email = user.email

        response = await client.post('/api/v1/auth/login', json={
            'email': email,
            'password': 'testpassword123'
        })

        assert response.status_code == 403


class TestCurrentUser:
    """Test the /me endpoint"""

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get('/api/v1/auth/me', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['id'] == test_user.id

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'UNAUTHENTICATED'

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer nope'})

        assert response.status_code == 401
