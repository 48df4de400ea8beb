"""
Core dependencies for route protection
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from community_backend.database.supabase_client import get_supabase
from community_backend.database.document_store import DocumentStore, get_document_store
from community_backend.modules.auth.service import AuthService
from community_backend.modules.users.service import UserService
from supabase import Client
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service),
    store: DocumentStore = Depends(get_document_store),
) -> Dict[str, Any]:
    """Resolve the bearer token to the caller's profile (id, username, discordId)"""
    identity = auth_service.get_current_user(credentials.credentials)
    result = UserService(store).fetch_user(user_id=identity["id"])
    if not result["userExists"]:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No profile found for this account"
        )
    return {**result["user"], "app_metadata": identity.get("app_metadata", {})}


def is_super_user(user_data: dict) -> bool:
    """Check if user is a super user from app_metadata"""
    # app_metadata is set server-side and cannot be modified by users
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def require_super_user(user_data: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if not is_super_user(user_data):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only super users can perform this action"
        )
    return user_data
