import logging
from datetime import datetime, timezone
from typing import Any, Dict

from community_backend.core.exceptions import DuplicateRecordError, RecordNotFoundError
from community_backend.database.document_store import DocumentStore

logger = logging.getLogger(__name__)

DISCORD_ROLES = "discordRoles"
MEMBER_GROUP_ROLES = "memberGroupRoles"
PHOTO_VERIFICATION = "photoVerification"

GROUP_ROLE_PREFIX = "group-"


def group_rolename(name: str) -> str:
    return f"{GROUP_ROLE_PREFIX}{name}"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DiscordRoleService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def is_group_role_exists(self, rolename: str) -> Dict[str, bool]:
        """Availability check for a group role name.

        ``wasSuccess`` is True when no role with this name exists yet and False
        when it is already taken.
        """
        existing = self.store.find_one(DISCORD_ROLES, {"rolename": rolename})
        return {"wasSuccess": existing is None}

    def create_new_role(self, role_data: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a group role. Raises DuplicateRecordError if the rolename was taken meanwhile."""
        role_id = self.store.add(DISCORD_ROLES, role_data)
        logger.info("Group role %s stored as %s", role_data.get("rolename"), role_id)
        return {"id": role_id, "roleData": role_data}

    def get_all_group_roles(self) -> Dict[str, Any]:
        groups = self.store.query(DISCORD_ROLES, order_by=[("date", False)])
        return {"groups": groups}

    def add_group_role_to_member(self, role_data: Dict[str, Any]) -> Dict[str, Any]:
        """Record a member/role pair unless it is already present.

        Returns ``wasSuccess`` False with the existing row as ``roleData`` when
        the member already holds the role.
        """
        pair = {"roleid": role_data["roleid"], "userid": role_data["userid"]}
        existing = self.store.find_one(MEMBER_GROUP_ROLES, pair)
        if existing is None:
            try:
                doc_id = self.store.add(MEMBER_GROUP_ROLES, role_data)
                return {"id": doc_id, "roleData": role_data, "wasSuccess": True}
            except DuplicateRecordError:
                existing = self.store.find_one(MEMBER_GROUP_ROLES, pair)
                if existing is None:
                    raise
        return {"id": existing["id"], "roleData": existing, "wasSuccess": False}

    def update_discord_image_for_verification(self, discord_id: str, avatar_url: str) -> str:
        """Reset the discord image section of the member's photo verification record"""
        record = self.store.find_one(PHOTO_VERIFICATION, {"discordId": discord_id})
        if record is None:
            raise RecordNotFoundError(PHOTO_VERIFICATION, f"discordId={discord_id}")
        self.store.update(PHOTO_VERIFICATION, record["id"], {
            "discord": {"approved": False, "date": utc_now(), "url": avatar_url},
        })
        return avatar_url
