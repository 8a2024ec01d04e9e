"""API v1 router aggregator.

All v1 endpoint routers are included here and mounted under /api/v1.
"""

from fastapi import APIRouter

from smartapply.api.v1 import admin, auth, navigation, profile, roadmaps

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Route Gating
# =============================================================================

router.include_router(navigation.router, prefix="/navigation", tags=["navigation"])

# =============================================================================
# Core Resource Routers
# =============================================================================

router.include_router(profile.router, prefix="/profile", tags=["profile"])
router.include_router(roadmaps.router, prefix="/roadmaps", tags=["roadmaps"])

# =============================================================================
# Admin
# =============================================================================

router.include_router(admin.router, prefix="/admin", tags=["admin"])
