from fastapi import APIRouter
from app.api.v1.endpoints import auth, onboarding, eid, gate, invest, teams, clusters, audit

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "hackhub-backend"}


# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(onboarding.router, prefix="/onboarding", tags=["Onboarding"])
api_router.include_router(eid.router, prefix="/eid", tags=["E-ID"])
api_router.include_router(gate.router, prefix="/gate", tags=["Gate"])
api_router.include_router(teams.router, prefix="/teams", tags=["Teams"])
api_router.include_router(invest.router, prefix="/invest", tags=["Investment Market"])
api_router.include_router(clusters.router, prefix="/clusters", tags=["Clusters"])
api_router.include_router(audit.router, prefix="/audit", tags=["Audit"])
