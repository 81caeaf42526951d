"""
Unit Tests for Investment Market Endpoints
"""
import pytest
from httpx import AsyncClient

from app.models.cluster import ClusterStage


class TestMarketView:

    @pytest.mark.asyncio
    async def test_view(self, client: AsyncClient, market, auth_for):
        response = await client.get('/api/v1/invest', headers=auth_for(market.member))

        assert response.status_code == 200
        data = response.json()
        assert data['my_team']['id'] == market.t1.id
        assert data['my_team']['balance'] == 1000000
        assert data['cluster']['name'] == 'Cluster Bidding'
        assert data['cluster']['bidding_open'] is True
        assert [t['name'] for t in data['target_teams']] == ['T2', 'T3']
        assert data['investments'] == []

    @pytest.mark.asyncio
    async def test_view_without_team(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/invest', headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['error']['message'] == 'No team assigned'


class TestCommitPortfolio:

    @pytest.mark.asyncio
    async def test_commit(self, client: AsyncClient, db_session, market, auth_for):
        response = await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t2.id, 'amount': 400000},
            {'target_team_id': market.t3.id, 'amount': 600000},
        ]}, headers=auth_for(market.lead))

        assert response.status_code == 200
        assert response.json() == {
            'success': True,
            'total_invested': 1000000.0,
            'message': 'Portfolio locked successfully!',
        }

        view = await client.get('/api/v1/invest', headers=auth_for(market.lead))
        my_team = view.json()['my_team']
        assert my_team['balance'] == 0
        assert my_team['is_finalized'] is True
        assert {i['target_team_id']: i['amount'] for i in view.json()['investments']} == {
            market.t2.id: 400000,
            market.t3.id: 600000,
        }

        await db_session.refresh(market.t2)
        assert float(market.t2.total_received) == 400000

    @pytest.mark.asyncio
    async def test_investments_alias(self, client: AsyncClient, market, auth_for):
        response = await client.post('/api/v1/invest', json={'investments': [
            {'target_team_id': market.t2.id, 'amount': 10},
        ]}, headers=auth_for(market.lead))

        assert response.status_code == 200
        assert response.json()['total_invested'] == 10

    @pytest.mark.asyncio
    async def test_commit_twice(self, client: AsyncClient, market, auth_for):
        headers = auth_for(market.lead)
        payload = {'allocations': [{'target_team_id': market.t2.id, 'amount': 10}]}

        await client.post('/api/v1/invest', json=payload, headers=headers)
        response = await client.post('/api/v1/invest', json=payload, headers=headers)

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'ALREADY_FINALIZED'

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, client: AsyncClient, market, auth_for):
        response = await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t2.id, 'amount': '1000000.01'},
        ]}, headers=auth_for(market.lead))

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INSUFFICIENT_BALANCE'

    @pytest.mark.asyncio
    async def test_member_cannot_commit(self, client: AsyncClient, market, auth_for):
        response = await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t2.id, 'amount': 10},
        ]}, headers=auth_for(market.member))

        assert response.status_code == 403
        assert response.json()['error']['message'] == 'Only team leads can commit portfolio'

    @pytest.mark.asyncio
    async def test_market_closed(self, client: AsyncClient, db_session, market, auth_for):
        headers = auth_for(market.lead)
        market.cluster.current_stage = ClusterStage.CLOSED
        market.cluster.bidding_open = False
        await db_session.commit()

        response = await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t2.id, 'amount': 10},
        ]}, headers=headers)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'MARKET_CLOSED'

    @pytest.mark.asyncio
    async def test_self_investment(self, client: AsyncClient, market, auth_for):
        response = await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t1.id, 'amount': 10},
        ]}, headers=auth_for(market.lead))

        assert response.status_code == 400
        error = response.json()['error']
        assert error['code'] == 'INVALID_ALLOCATION'
        assert error['details']['target_team_id'] == market.t1.id

    @pytest.mark.asyncio
    async def test_empty_allocations(self, client: AsyncClient, market, auth_for):
        response = await client.post('/api/v1/invest', json={'allocations': []}, headers=auth_for(market.lead))

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'No investments provided'

    @pytest.mark.asyncio
    async def test_non_numeric_amount(self, client: AsyncClient, market, auth_for):
        response = await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t2.id, 'amount': 'lots'},
        ]}, headers=auth_for(market.lead))

        assert response.status_code == 422
