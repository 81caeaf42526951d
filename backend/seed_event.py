"""
Seed a demo event

Creates staff accounts, a college, two clusters and a handful of teams so the
gate scanner and the investment market can be tried end to end:
- superadmin@hackhub.dev / demo1234 → Super Admin (clusters, audit logs)
- admin@hackhub.dev / demo1234 → Admin (token revocation)
- gate@hackhub.dev / demo1234 → Gate Staff (QR verification)
- lead1@hackhub.dev ... lead4@hackhub.dev / demo1234 → Team Leads

Run with: python seed_event.py
          python seed_event.py list
"""
import asyncio
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy import select

from app.core.config import settings
from app.core.database import AsyncSessionLocal, init_db
from app.core.security import get_password_hash
from app.models.cluster import Cluster, ClusterStage
from app.models.college import College
from app.models.team import Team, generate_team_code
from app.models.user import User, UserRole
from app.services.onboarding_service import allocate_entity_id


DEMO_PASSWORD = "demo1234"

STAFF_USERS = [
    {"email": "superadmin@hackhub.dev", "full_name": "Demo Super Admin", "role": UserRole.SUPER_ADMIN},
    {"email": "admin@hackhub.dev", "full_name": "Demo Admin", "role": UserRole.ADMIN},
    {"email": "gate@hackhub.dev", "full_name": "Demo Gate Staff", "role": UserRole.GATE_STAFF},
]

CLUSTERS = [
    {"name": "Cluster Alpha", "location": "Hall A", "tier": "gold", "stage": ClusterStage.BIDDING, "bidding_open": True},
    {"name": "Cluster Beta", "location": "Hall B", "tier": "silver", "stage": ClusterStage.PITCHING, "bidding_open": False},
]

TEAMS = [
    ("Byte Bandits", "FinTech", "Cluster Alpha"),
    ("Null Pointers", "EdTech", "Cluster Alpha"),
    ("Stack Smashers", "HealthTech", "Cluster Alpha"),
    ("Kernel Panic", "AgriTech", "Cluster Beta"),
]


async def _get_or_create_user(db, email: str, **fields) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"  Exists:  {email} ({user.role.value})")
        return user

    user = User(email=email, hashed_password=get_password_hash(DEMO_PASSWORD), is_active=True, **fields)
    db.add(user)
    await db.flush()
    print(f"  Created: {email} ({user.role.value})")
    return user


async def seed_event():
    """Create or reuse the demo event data"""
    print("=" * 50)
    print("Seeding Demo Event...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        for staff in STAFF_USERS:
            await _get_or_create_user(db, staff["email"], full_name=staff["full_name"], role=staff["role"])

        result = await db.execute(select(College).where(College.name == "Demo Engineering College"))
        college = result.scalar_one_or_none()
        if not college:
            college = College(name="Demo Engineering College", location="Kochi")
            db.add(college)
            await db.flush()

        clusters = {}
        for entry in CLUSTERS:
            result = await db.execute(select(Cluster).where(Cluster.name == entry["name"]))
            cluster = result.scalar_one_or_none()
            if not cluster:
                cluster = Cluster(
                    name=entry["name"],
                    location=entry["location"],
                    tier=entry["tier"],
                    max_teams=settings.CLUSTER_DEFAULT_MAX_TEAMS,
                    current_stage=entry["stage"],
                    bidding_open=entry["bidding_open"],
                )
                db.add(cluster)
                await db.flush()
                print(f"  Cluster: {cluster.name} ({cluster.current_stage.value})")
            clusters[entry["name"]] = cluster

        for index, (name, domain, cluster_name) in enumerate(TEAMS, start=1):
            result = await db.execute(select(Team).where(Team.name == name))
            if result.scalar_one_or_none():
                print(f"  Team exists: {name}")
                continue

            lead = await _get_or_create_user(
                db,
                f"lead{index}@hackhub.dev",
                full_name=f"{name} Lead",
                role=UserRole.TEAM_LEAD,
                college_id=college.id,
            )
            if not lead.entity_id:
                lead.entity_id = await allocate_entity_id(db)

            team = Team(
                name=name,
                code=generate_team_code(),
                domain=domain,
                college_id=college.id,
                cluster_id=clusters[cluster_name].id,
                leader_id=lead.id,
            )
            db.add(team)
            await db.flush()
            lead.team_id = team.id
            print(f"  Team:    {name} [{team.display_code}] in {cluster_name}")

        await db.commit()

    print("=" * 50)
    print("Demo Event Seeded Successfully!")
    print(f"All accounts use the password: {DEMO_PASSWORD}")
    print("=" * 50)


async def list_event():
    """List clusters and their teams"""
    await init_db()

    async with AsyncSessionLocal() as db:
        clusters = (await db.execute(select(Cluster).order_by(Cluster.name))).scalars().all()

        print("\nClusters:")
        print("-" * 70)
        for cluster in clusters:
            teams = (await db.execute(
                select(Team).where(Team.cluster_id == cluster.id).order_by(Team.name)
            )).scalars().all()
            state = "open" if cluster.is_market_open else "closed"
            print(f"{cluster.name:<20} {cluster.current_stage.value:<12} market {state}")
            for team in teams:
                print(f"    {team.name:<24} {team.display_code:<10} balance {team.balance}")

        if not clusters:
            print("No clusters found. Run 'python seed_event.py' to create them.")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "list":
        asyncio.run(list_event())
    else:
        asyncio.run(seed_event())
