from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cyberlearn.core.config import settings
from cyberlearn.schemas.response import APIResponse
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.leaderboard import Leaderboard
from cyberlearn.services.leaderboard import leaderboard_service
from cyberlearn.utils import deps

router = APIRouter()


@router.get("", response_model=APIResponse[Leaderboard])
async def get_leaderboard(
    *,
    db: Session = Depends(deps.get_db),
    limit: Optional[int] = Query(None, ge=1, le=settings.LEADERBOARD_MAX_LIMIT),
    identity: Optional[Identity] = Depends(deps.get_current_identity)
):
    leaderboard = leaderboard_service.get_leaderboard(db, identity, n=limit)
    return APIResponse(message="Leaderboard retrieved successfully", data=leaderboard)
