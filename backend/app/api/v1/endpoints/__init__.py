# API endpoints
from . import auth, onboarding, eid, gate, invest, teams, clusters, audit

__all__ = ["auth", "onboarding", "eid", "gate", "invest", "teams", "clusters", "audit"]
