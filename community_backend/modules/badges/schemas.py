from pydantic import BaseModel, Field
from typing import Optional, List


class DateTimeParts(BaseModel):
    date: str
    time: str


class BadgeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    imageUrl: Optional[str] = None


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    createdBy: Optional[str] = None
    createdAt: DateTimeParts


class BadgeCreatedResponse(BaseModel):
    message: str
    id: str
    createdAt: DateTimeParts


class BadgeListResponse(BaseModel):
    message: str
    badges: List[BadgeResponse]


class UserBadgesResponse(BaseModel):
    message: str
    userExists: bool
    badgeIds: List[str]


class BadgeAssign(BaseModel):
    userId: str
    badgeIds: List[str] = Field(..., min_length=1)


class BadgeAssignResponse(BaseModel):
    message: str
    docIds: List[str]
