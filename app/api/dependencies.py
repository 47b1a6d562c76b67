from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorClient

from app.config import settings
from app.services.match_service import MatchService

# Connect to MongoDB (the client connects lazily on first operation)
client = AsyncIOMotorClient(settings.MONGO_URI)
db = client[settings.MONGO_DB_NAME]


async def get_database():
    """Get database dependency for dependency injection"""
    return db


async def get_match_service(database=Depends(get_database)) -> MatchService:
    """Match service bound to the request's database"""
    return MatchService(database)
