"""
Unit Tests for Cluster Management and Audit Endpoints (super admin)
"""
import pytest
from httpx import AsyncClient

from app.models.cluster import ClusterStage
from app.services.audit_service import AuditEvent


class TestClusters:

    @pytest.mark.asyncio
    async def test_create_cluster(self, client: AsyncClient, super_admin_headers):
        response = await client.post(
            '/api/v1/clusters', json={'name': 'Cluster Kochi', 'tier': 'gold', 'max_teams': 8}, headers=super_admin_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data['name'] == 'Cluster Kochi'
        assert data['max_teams'] == 8
        assert data['current_stage'] == 'onboarding'
        assert data['bidding_open'] is False

    @pytest.mark.asyncio
    async def test_duplicate_cluster(self, client: AsyncClient, super_admin_headers, make_cluster):
        await make_cluster(name='Cluster Kochi')

        response = await client.post('/api/v1/clusters', json={'name': 'Cluster Kochi'}, headers=super_admin_headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_admin_is_not_super_admin(self, client: AsyncClient, admin_auth_headers):
        response = await client.get('/api/v1/clusters', headers=admin_auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_overview(self, client: AsyncClient, super_admin_headers, market, make_team):
        await make_team(name='Loners')

        response = await client.get('/api/v1/clusters', headers=super_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['stats'] == {'total_clusters': 1, 'total_teams': 4, 'assigned_teams': 3, 'unassigned_teams': 1}
        assert [t['name'] for t in data['clusters'][0]['teams']] == ['T1', 'T2', 'T3']
        assert [t['name'] for t in data['unassigned_teams']] == ['Loners']

    @pytest.mark.asyncio
    async def test_open_and_close_market(self, client: AsyncClient, super_admin_headers, make_cluster):
        cluster = await make_cluster(name='Cluster Pitch', stage=ClusterStage.PITCHING, bidding_open=False)
        url = f'/api/v1/clusters/{cluster.id}/market'

        opened = await client.patch(url, json={'current_stage': 'bidding', 'bidding_open': True}, headers=super_admin_headers)
        closed = await client.patch(url, json={'current_stage': 'closed'}, headers=super_admin_headers)

        assert opened.status_code == 200
        assert opened.json()['bidding_open'] is True
        assert closed.json()['current_stage'] == 'closed'
        assert closed.json()['bidding_open'] is False

    @pytest.mark.asyncio
    async def test_bidding_outside_stage(self, client: AsyncClient, super_admin_headers, make_cluster):
        cluster = await make_cluster(stage=ClusterStage.ONBOARDING, bidding_open=False)

        response = await client.patch(
            f'/api/v1/clusters/{cluster.id}/market', json={'bidding_open': True}, headers=super_admin_headers
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_invalid_stage(self, client: AsyncClient, super_admin_headers, make_cluster):
        cluster = await make_cluster()

        response = await client.patch(
            f'/api/v1/clusters/{cluster.id}/market', json={'current_stage': 'auction'}, headers=super_admin_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_assign_teams(self, client: AsyncClient, db_session, super_admin_headers, make_cluster, make_team):
        cluster = await make_cluster()
        team = await make_team()

        response = await client.post(
            f'/api/v1/clusters/{cluster.id}/teams', json={'team_ids': [team.id]}, headers=super_admin_headers
        )

        assert response.status_code == 200
        await db_session.refresh(team)
        assert team.cluster_id == cluster.id

    @pytest.mark.asyncio
    async def test_assign_to_unknown_cluster(self, client: AsyncClient, super_admin_headers, make_team):
        team = await make_team()

        response = await client.post(
            '/api/v1/clusters/00000000-0000-0000-0000-000000000000/teams',
            json={'team_ids': [team.id]},
            headers=super_admin_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_shuffle(self, client: AsyncClient, super_admin_headers, make_cluster, make_team):
        await make_cluster()
        await make_cluster()
        for _ in range(3):
            await make_team()

        response = await client.post('/api/v1/clusters/shuffle', json={}, headers=super_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['stats'] == {'total_teams': 3, 'assigned_teams': 3, 'unassigned_teams': 0}
        assert sorted(s['team_count'] for s in data['cluster_stats']) == [1, 2]
        assert len(data['assignments']) == 3


class TestAuditLogs:

    @pytest.mark.asyncio
    async def test_commit_is_audited(self, client: AsyncClient, market, auth_for, super_admin_headers):
        await client.post('/api/v1/invest', json={'allocations': [
            {'target_team_id': market.t2.id, 'amount': 10},
        ]}, headers=auth_for(market.lead))

        response = await client.get(
            '/api/v1/audit/logs', params={'event_type': AuditEvent.PORTFOLIO_COMMITTED}, headers=super_admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 1
        assert data['logs'][0]['target_id'] == market.t1.id
        assert data['logs'][0]['details']['total'] == '10'

    @pytest.mark.asyncio
    async def test_gate_staff_cannot_read(self, client: AsyncClient, gate_headers):
        response = await client.get('/api/v1/audit/logs', headers=gate_headers)

        assert response.status_code == 403
