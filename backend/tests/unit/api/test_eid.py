"""
Unit Tests for Onboarding and E-ID Endpoints
"""
import pytest
from httpx import AsyncClient

from app.services import entity_token_service


class TestOnboarding:

    @pytest.mark.asyncio
    async def test_complete_onboarding(self, client: AsyncClient, test_user, auth_headers):
        response = await client.post(
            '/api/v1/onboarding/complete',
            json={'photo_url': 'https://cdn.example.com/p/1.jpg'},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['entity_id'].startswith('OF-')
        assert data['user']['entity_id'] == data['entity_id']
        assert data['user']['photo_url'] == 'https://cdn.example.com/p/1.jpg'
        assert entity_token_service.check(data['qr_token']).entity_id == data['entity_id']

    @pytest.mark.asyncio
    async def test_repeat_onboarding_keeps_entity_id(self, client: AsyncClient, auth_headers):
        first = await client.post(
            '/api/v1/onboarding/complete', json={'photo_url': 'https://cdn.example.com/a.jpg'}, headers=auth_headers
        )
        second = await client.post(
            '/api/v1/onboarding/complete', json={'photo_url': 'https://cdn.example.com/b.jpg'}, headers=auth_headers
        )

        assert first.json()['entity_id'] == second.json()['entity_id']
        assert second.json()['user']['photo_url'] == 'https://cdn.example.com/b.jpg'

    @pytest.mark.asyncio
    async def test_photo_required(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/onboarding/complete', json={}, headers=auth_headers)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.post('/api/v1/onboarding/complete', json={'photo_url': 'x'})

        assert response.status_code == 401


class TestQRToken:

    @pytest.mark.asyncio
    async def test_get_before_onboarding(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/eid/qr', headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'NOT_ONBOARDED'

    @pytest.mark.asyncio
    async def test_get_after_onboarding(self, client: AsyncClient, auth_headers):
        onboarding = await client.post(
            '/api/v1/onboarding/complete', json={'photo_url': 'https://cdn.example.com/a.jpg'}, headers=auth_headers
        )

        response = await client.get('/api/v1/eid/qr', headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['qr_token'] == onboarding.json()['qr_token']
        assert data['entity_id'] == onboarding.json()['entity_id']
        assert data['generated_at'] is not None

    @pytest.mark.asyncio
    async def test_refresh_issues_valid_token(self, client: AsyncClient, onboarded_user, auth_for):
        headers = auth_for(onboarded_user)

        response = await client.post('/api/v1/eid/qr', headers=headers)

        assert response.status_code == 200
        token = response.json()['qr_token']
        assert token.startswith('OF-2026-A7F3:')
        assert entity_token_service.check(token).entity_id == 'OF-2026-A7F3'

    @pytest.mark.asyncio
    async def test_refresh_before_onboarding(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/eid/qr', headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'NOT_ONBOARDED'
