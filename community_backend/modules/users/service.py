import logging
from typing import Any, Dict, Optional

from community_backend.database.document_store import DocumentStore

logger = logging.getLogger(__name__)

USERS = "users"


class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def fetch_user(self, username: Optional[str] = None, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Look a user up by username or id. Returns {"userExists", "user"}; a miss is not an error."""
        if user_id is not None:
            user = self.store.find_one(USERS, {"id": user_id})
        elif username is not None:
            user = self.store.find_one(USERS, {"username": username})
        else:
            raise ValueError("fetch_user needs a username or a user_id")
        return {"userExists": user is not None, "user": user or {}}
