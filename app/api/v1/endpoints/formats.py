from fastapi import APIRouter, Depends

from app.models import Format, FormatCreate
from app.models.auth import CurrentUser
from app.api.dependencies import get_match_service
from app.services.match_service import MatchService
from app.utils.auth import get_current_user

router = APIRouter()


@router.post("/", response_model=Format)
async def create_format(
    format_create: FormatCreate,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a scoring format"""
    return await service.create_format(format_create)


@router.get("/{format_id}", response_model=Format)
async def get_format(
    format_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a specific format"""
    return await service.get_format(format_id)
