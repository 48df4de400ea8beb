import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from community_backend.core.dependencies import get_current_user, require_super_user
from community_backend.core.exceptions import DocumentStoreError, INTERNAL_SERVER_ERROR
from community_backend.database.document_store import DocumentStore, get_document_store
from community_backend.modules.badges.schemas import (
    BadgeCreate, BadgeCreatedResponse, BadgeListResponse,
    UserBadgesResponse, BadgeAssign, BadgeAssignResponse
)
from community_backend.modules.badges.service import BadgeService
from typing import Dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/badges", tags=["badges"])


def get_badge_service(store: DocumentStore = Depends(get_document_store)) -> BadgeService:
    return BadgeService(store)


@router.get("", response_model=BadgeListResponse)
async def get_badges(
    size: int = Query(100, ge=1, le=1000),
    page: int = Query(0, ge=0),
    user_data: Dict = Depends(get_current_user),
    service: BadgeService = Depends(get_badge_service)
):
    """List badges, one page at a time"""
    try:
        badges = service.fetch_badges(size=size, page=page)
    except DocumentStoreError:
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)
    return {"message": "Badges returned successfully!", "badges": badges}


@router.get("/{username}", response_model=UserBadgesResponse)
async def get_user_badges(
    username: str,
    user_data: Dict = Depends(get_current_user),
    service: BadgeService = Depends(get_badge_service)
):
    """Badge ids assigned to a user; unknown users yield userExists=false"""
    try:
        result = service.fetch_user_badge_ids(username)
    except DocumentStoreError:
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)
    message = "User badges returned successfully!" if result["userExists"] else "Failed to get user badges."
    return {"message": message, **result}


@router.post("", response_model=BadgeCreatedResponse, status_code=201)
async def create_badge(
    badge_data: BadgeCreate,
    user_data: Dict = Depends(require_super_user),
    service: BadgeService = Depends(get_badge_service)
):
    """Create a badge (super users only)"""
    try:
        result = service.create_badge(
            name=badge_data.name,
            description=badge_data.description,
            image_url=badge_data.imageUrl,
            created_by=user_data["id"],
        )
    except DocumentStoreError:
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)
    return {"message": "Badge created successfully!", **result}


@router.post("/assign", response_model=BadgeAssignResponse, status_code=201)
async def assign_badges(
    assignment: BadgeAssign,
    user_data: Dict = Depends(require_super_user),
    service: BadgeService = Depends(get_badge_service)
):
    """Assign badges to a user (super users only)"""
    try:
        result = service.assign_badges(user_id=assignment.userId, badge_ids=assignment.badgeIds)
    except DocumentStoreError:
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)
    return {"message": "Badges assigned successfully!", **result}


@router.delete("/assign", response_model=BadgeAssignResponse)
async def un_assign_badges(
    assignment: BadgeAssign,
    user_data: Dict = Depends(require_super_user),
    service: BadgeService = Depends(get_badge_service)
):
    """Remove badges from a user (super users only)"""
    try:
        result = service.un_assign_badges(user_id=assignment.userId, badge_ids=assignment.badgeIds)
    except DocumentStoreError:
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)
    return {"message": "Badges unassigned successfully!", **result}
