from fastapi import APIRouter

from .endpoints import formats, groups, matches

# Create the main API v1 router
api_router = APIRouter()

# Include all endpoint routers with their prefixes
api_router.include_router(
    formats.router,
    prefix="/formats",
    tags=["formats"]
)

api_router.include_router(
    groups.router,
    prefix="/groups",
    tags=["groups"]
)

api_router.include_router(
    matches.router,
    prefix="/matches",
    tags=["matches"]
)

# Health check endpoint
@api_router.get("/", tags=["health"])
async def health_check():
    return {"message": "Rally Tournament API v1"}
