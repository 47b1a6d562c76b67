from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.api.v1.router import api_router
from app.api.dependencies import client
from fastapi.middleware.cors import CORSMiddleware
from app.exceptions import TournamentError
from app.utils.logging import get_logger
import time

# Get logger for this module
logger = get_logger(__name__)

from app.config import settings

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.PROJECT_VERSION
)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

# Ensure CORS origins are clean (no duplicates, no wildcards mixed with specific origins)
clean_origins = []
for origin in settings.CORS_ORIGINS:
    if origin and origin != "*":
        if origin not in clean_origins:
            clean_origins.append(origin)

logger.info(f"Clean CORS Origins: {clean_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=clean_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TournamentError)
async def tournament_error_handler(request: Request, exc: TournamentError):
    """Render domain errors the same way as HTTPException"""
    log = logger.warning if exc.status_code >= 403 else logger.info
    log(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming HTTP requests"""
    start_time = time.time()
    logger.info(f"{request.method} {request.url.path} - Client: {request.client.host if request.client else 'unknown'}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"{request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s")
    return response


# Test the actual connection
@app.on_event("startup")
async def startup_event():
    try:
        await client.admin.command('ping')
        logger.info("MongoDB connection successful")
    except Exception as e:
        logger.error(f"MongoDB connection failed: {str(e)}")
        logger.error("Please check MONGO_URI and that the server is reachable")

    logger.info(f"   ENVIRONMENT: {settings.ENVIRONMENT}")
    logger.info(f"   MONGO_DB_NAME: {settings.MONGO_DB_NAME}")
    logger.info(f"   API_V1_STR: {settings.API_V1_STR}")
    logger.info(f"   LOG_LEVEL: {settings.LOG_LEVEL}")
    logger.info(f"   SHUFFLE_GROUP_SCHEDULE: {settings.SHUFFLE_GROUP_SCHEDULE}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup resources on app shutdown"""
    logger.info("Shutting down application...")
    client.close()


# Root endpoint (public - no authentication required)
@app.get("/")
async def root():
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "docs": "/docs",
    }
