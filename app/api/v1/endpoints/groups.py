from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.models import GroupCreate, GroupWithTeams, Match
from app.models.auth import CurrentUser
from app.api.dependencies import get_match_service
from app.services.match_service import MatchService
from app.utils.auth import get_current_user
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class GroupSchedule(BaseModel):
    group: GroupWithTeams
    matches: List[Match]


@router.post("/", response_model=GroupSchedule)
async def create_group(
    group_create: GroupCreate,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a group with its teams and generate the round-robin matches"""
    group, matches = await service.create_group(group_create)
    logger.info(f"Group {group.id} created by {current_user.user_id}")
    return GroupSchedule(group=group, matches=matches)


@router.get("/{group_id}", response_model=GroupWithTeams)
async def get_group(
    group_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a group and its teams"""
    return await service.get_group(group_id)


@router.get("/{group_id}/matches", response_model=List[Match])
async def get_group_matches(
    group_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a group's matches in schedule order"""
    return await service.list_group_matches(group_id)
