from fastapi import APIRouter, Depends

from app.models import Match, MatchDetails, MatchScoreUpdate, MatchWithFormat, PointScored
from app.models.auth import CurrentUser
from app.api.dependencies import get_match_service
from app.services.match_service import MatchService
from app.utils.auth import get_current_user
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/{match_id}", response_model=Match)
async def get_match(
    match_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a match with its games"""
    return await service.get_match(match_id)


@router.get("/{match_id}/format", response_model=MatchWithFormat)
async def get_match_format(
    match_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a match together with the format it is scored under"""
    return await service.get_match_with_format(match_id)


@router.get("/{match_id}/details", response_model=MatchDetails)
async def get_match_details(
    match_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a match together with both teams"""
    return await service.get_match_details(match_id)


@router.post("/{match_id}/umpire", response_model=bool)
async def assign_umpire(
    match_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Claim a match as its umpire. Returns false if someone already has."""
    claimed = await service.assign_umpire(match_id, current_user.user_id)
    logger.info(f"Umpire claim on match {match_id} by {current_user.user_id}: {claimed}")
    return claimed


@router.post("/{match_id}/points", response_model=Match)
async def record_point(
    match_id: str,
    point: PointScored,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record a point for one side, optionally naming the server and receiver"""
    return await service.record_point(
        match_id, point.team, current_user.user_id, server=point.server, receiver=point.receiver
    )


@router.post("/{match_id}/undo", response_model=Match)
async def undo_last_point(
    match_id: str,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Revert the last point of the current game"""
    return await service.undo_last_point(match_id, current_user.user_id)


@router.put("/{match_id}/score", response_model=Match)
async def update_match_score(
    match_id: str,
    score: MatchScoreUpdate,
    service: MatchService = Depends(get_match_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Set the current game's score directly and declare the match result"""
    return await service.update_final_score(match_id, score, current_user.user_id)
