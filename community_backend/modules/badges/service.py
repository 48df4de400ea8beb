import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from pydantic import TypeAdapter

from community_backend.core.exceptions import DocumentStoreError
from community_backend.database.document_store import DocumentStore
from community_backend.modules.users.service import UserService

logger = logging.getLogger(__name__)

BADGES = "badges"
USER_BADGES = "userBadges"

_TIMESTAMP = TypeAdapter(datetime)


def split_timestamp(value: Union[str, datetime]) -> Dict[str, str]:
    """Split a stored timestamp into display date ("Mon Jan 01 2024") and time ("10:00:00 AM") in UTC"""
    if isinstance(value, str):
        value = _TIMESTAMP.validate_python(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return {"date": value.strftime("%a %b %d %Y"), "time": value.strftime("%I:%M:%S %p")}


class BadgeService:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.users = UserService(store)

    def fetch_badges(self, size: int = 100, page: int = 0) -> List[Dict[str, Any]]:
        """Return one page of badges ordered by creation time, oldest first"""
        try:
            records = self.store.query(
                BADGES,
                order_by=[("createdAt", False), ("id", False)],
                limit=size,
                offset=size * page,
            )
        except DocumentStoreError as e:
            logger.error(f"Error retrieving badges: {e}")
            raise
        try:
            return [
                {
                    "id": record["id"],
                    "name": record.get("name"),
                    "description": record.get("description"),
                    "imageUrl": record.get("imageUrl"),
                    "createdBy": record.get("createdBy"),
                    "createdAt": split_timestamp(record["createdAt"]),
                }
                for record in records
            ]
        except ValueError as e:
            logger.error(f"Malformed badge createdAt: {e}")
            raise DocumentStoreError(f"Malformed createdAt in {BADGES}: {e}") from e

    def fetch_user_badge_ids(self, username: str) -> Dict[str, Any]:
        try:
            result = self.users.fetch_user(username=username)
            if not result["userExists"]:
                return {"userExists": False, "badgeIds": []}
            rows = self.store.query(USER_BADGES, filters={"userId": result["user"]["id"]})
        except DocumentStoreError as e:
            logger.error(f"Error retrieving user badges: {e}")
            raise
        return {"userExists": True, "badgeIds": [row["badgeId"] for row in rows]}

    def create_badge(self, name: str, description: str, image_url: str, created_by: str) -> Dict[str, Any]:
        created_at = datetime.now(timezone.utc)
        try:
            badge_id = self.store.add(BADGES, {
                "name": name,
                "description": description,
                "imageUrl": image_url,
                "createdBy": created_by,
                "createdAt": created_at.isoformat(),
            })
        except DocumentStoreError as e:
            logger.error(f"Error creating badge: {e}")
            raise
        logger.info("Badge %s created by %s", badge_id, created_by)
        return {"id": badge_id, "createdAt": split_timestamp(created_at)}

    def assign_badges(self, user_id: str, badge_ids: List[str]) -> Dict[str, List[str]]:
        """Create one userBadges row per badge id in a single batch. Not idempotent."""
        batch = self.store.batch()
        doc_ids = [batch.create(USER_BADGES, {"userId": user_id, "badgeId": badge_id}) for badge_id in badge_ids]
        try:
            batch.commit()
        except DocumentStoreError as e:
            logger.error(f"Error assigning badges: {e}")
            raise
        return {"docIds": doc_ids}

    def un_assign_badges(self, user_id: str, badge_ids: List[str]) -> Dict[str, List[str]]:
        """Delete the user's rows for the given badges in a single batch; unmatched ids are ignored"""
        try:
            rows = self.store.query(
                USER_BADGES,
                filters={"userId": user_id},
                in_filters={"badgeId": badge_ids},
            )
            batch = self.store.batch()
            doc_ids = []
            for row in rows:
                batch.delete(USER_BADGES, row["id"])
                doc_ids.append(row["id"])
            batch.commit()
        except DocumentStoreError as e:
            logger.error(f"Error un-assigning badges: {e}")
            raise
        return {"docIds": doc_ids}
