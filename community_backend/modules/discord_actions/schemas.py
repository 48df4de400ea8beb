from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class GroupRoleCreate(BaseModel):
    rolename: str = Field(..., min_length=1)


class GroupRoleResponse(BaseModel):
    id: str
    rolename: str
    roleid: Optional[str] = None
    createdBy: Optional[str] = None
    date: Optional[str] = None


class GroupRoleCreatedResponse(BaseModel):
    message: str
    id: str


class GroupRoleListResponse(BaseModel):
    message: str
    groups: List[GroupRoleResponse]


class MemberGroupRoleCreate(BaseModel):
    roleid: str
    userid: str

    # Extra fields are forwarded to the bot but never stored
    model_config = ConfigDict(extra="allow")


class MessageResponse(BaseModel):
    message: str


class DiscordAvatarResponse(BaseModel):
    message: str
    discordAvatarUrl: str
