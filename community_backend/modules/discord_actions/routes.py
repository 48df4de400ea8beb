import logging
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from community_backend.core.dependencies import get_current_user
from community_backend.core.exceptions import DuplicateRecordError, INTERNAL_SERVER_ERROR
from community_backend.database.document_store import DocumentStore, get_document_store
from community_backend.modules.discord_actions.bot_gateway import BotGatewayClient, get_bot_gateway
from community_backend.modules.discord_actions.schemas import (
    GroupRoleCreate, GroupRoleCreatedResponse, GroupRoleListResponse,
    MemberGroupRoleCreate, MessageResponse, DiscordAvatarResponse
)
from community_backend.modules.discord_actions.service import DiscordRoleService, group_rolename, utc_now
from typing import Dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discord-actions", tags=["discord-actions"])

ROLE_EXISTS = "Role already exists!"


def get_discord_role_service(store: DocumentStore = Depends(get_document_store)) -> DiscordRoleService:
    return DiscordRoleService(store)


@router.put("/groups", response_model=GroupRoleCreatedResponse, status_code=201)
async def create_group_role(
    role: GroupRoleCreate,
    user_data: Dict = Depends(get_current_user),
    service: DiscordRoleService = Depends(get_discord_role_service),
    bot: BotGatewayClient = Depends(get_bot_gateway)
):
    """Create a group role on Discord and record it"""
    try:
        rolename = group_rolename(role.rolename)
        if not service.is_group_role_exists(rolename)["wasSuccess"]:
            return JSONResponse(status_code=400, content={"message": ROLE_EXISTS})

        created = await bot.create_role(rolename, mentionable=True)
        group_role = {
            "rolename": rolename,
            "roleid": created["id"],
            "createdBy": user_data["id"],
            "date": utc_now(),
        }
        try:
            result = service.create_new_role(group_role)
        except DuplicateRecordError:
            logger.warning(f"Group role {rolename} was created concurrently; Discord role {group_role['roleid']} is orphaned")
            return JSONResponse(status_code=400, content={"message": ROLE_EXISTS})
        return {"message": "Role created successfully!", "id": result["id"]}
    except Exception as e:
        logger.error(f"Error while creating new Role: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)


@router.get("/groups", response_model=GroupRoleListResponse)
async def get_all_group_roles(
    user_data: Dict = Depends(get_current_user),
    service: DiscordRoleService = Depends(get_discord_role_service)
):
    """List every group role"""
    try:
        groups = service.get_all_group_roles()["groups"]
        return {"message": "Roles fetched successfully!", "groups": groups}
    except Exception as e:
        logger.error(f"Error while getting roles: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)


@router.put("/roles", response_model=MessageResponse, status_code=201)
async def add_group_role_to_member(
    member_role: MemberGroupRoleCreate,
    user_data: Dict = Depends(get_current_user),
    service: DiscordRoleService = Depends(get_discord_role_service),
    bot: BotGatewayClient = Depends(get_bot_gateway)
):
    """Give a Discord member a group role"""
    try:
        body = member_role.model_dump()
        result = service.add_group_role_to_member({
            "roleid": member_role.roleid,
            "userid": member_role.userid,
            "date": utc_now(),
        })
        if not result["wasSuccess"]:
            return JSONResponse(
                status_code=400,
                content={"message": ROLE_EXISTS, "data": {**result["roleData"]}},
            )
        await bot.add_role(body)
        return {"message": "Role added successfully!"}
    except Exception as e:
        logger.error(f"Error while adding new Role: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)


@router.patch("/nickname", response_model=MessageResponse)
async def change_nickname_of_users(
    user_data: Dict = Depends(get_current_user),
    bot: BotGatewayClient = Depends(get_bot_gateway)
):
    """Rename the caller on Discord to "<username>-ooo" """
    discord_id = user_data.get("discordId")
    if not discord_id:
        raise HTTPException(status_code=400, detail="User is not linked to a Discord account")
    try:
        await bot.change_nickname(discord_id, f"{user_data['username']}-ooo")
        return {"message": "nickname has been changed"}
    except Exception as e:
        logger.error(f"Error while updating nickname: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)


@router.patch("/avatar/verify/{discord_id}", response_model=DiscordAvatarResponse)
async def update_discord_image_for_verification(
    discord_id: str,
    user_data: Dict = Depends(get_current_user),
    service: DiscordRoleService = Depends(get_discord_role_service),
    bot: BotGatewayClient = Depends(get_bot_gateway)
):
    """Refresh the member's Discord avatar on their photo verification record"""
    try:
        avatar_url = await bot.get_avatar_url(discord_id)
        discord_avatar_url = service.update_discord_image_for_verification(discord_id, avatar_url)
        return {"message": "Discord avatar URL updated successfully!", "discordAvatarUrl": discord_avatar_url}
    except Exception as e:
        logger.error(f"Error while updating discord image url verification document: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)
