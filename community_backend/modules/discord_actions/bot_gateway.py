"""
Client for the Discord bot gateway.

Every request carries a freshly minted RS256 bearer token. There is no retry
and no timeout override: httpx transport defaults apply.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx
import jwt
from fastapi import Depends

from community_backend.config.settings import BotGatewayConfig, settings
from community_backend.core.exceptions import BotGatewayError

logger = logging.getLogger(__name__)

DISCORD_AVATAR_URL = "https://cdn.discordapp.com/avatars/{user_id}/{avatar}.png"


class BotGatewayClient:
    def __init__(self, config: BotGatewayConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def sign_token(self, claims: Optional[Dict[str, Any]] = None) -> str:
        now = int(time.time())
        payload = {**(claims or {}), "iat": now, "exp": now + self.config.token_ttl}
        return jwt.encode(payload, self.config.private_key, algorithm=self.config.algorithm)

    def _url(self, url_or_path: str) -> str:
        if url_or_path.startswith(("http://", "https://")):
            return url_or_path
        return f"{self.config.base_url}/{url_or_path.lstrip('/')}"

    async def request(self, method: str, url_or_path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """Send a signed request and return the decoded JSON body"""
        url = self._url(url_or_path)
        headers = {"Authorization": f"Bearer {self.sign_token()}"}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(method, url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise BotGatewayError(f"{method} {url} failed: {e}") from e

        if response.is_error:
            raise BotGatewayError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise BotGatewayError(f"{method} {url} returned invalid JSON", status_code=response.status_code) from e

    async def create_role(self, rolename: str, mentionable: bool = True) -> Dict[str, Any]:
        created = await self.request("PUT", "/roles/create", {"rolename": rolename, "mentionable": mentionable})
        if not isinstance(created, dict) or not created.get("id"):
            raise BotGatewayError(f"Role {rolename} was created without a role id in the response")
        return created

    async def add_role(self, member_role: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("PUT", "/roles/add", member_role)

    async def change_nickname(self, discord_id: str, nickname: str) -> Dict[str, Any]:
        return await self.request(
            "PATCH",
            self.config.nickname_url,
            {"userName": nickname, "discordId": discord_id},
        )

    async def get_member(self, discord_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/discord-members/{discord_id}")

    async def get_avatar_url(self, discord_id: str) -> str:
        """Resolve a member's current avatar to a Discord CDN URL"""
        member = await self.get_member(discord_id)
        user = member.get("user") or {}
        if not user.get("id") or not user.get("avatar"):
            raise BotGatewayError(f"Discord member {discord_id} has no avatar")
        return DISCORD_AVATAR_URL.format(user_id=user["id"], avatar=user["avatar"])


def get_bot_gateway_config() -> BotGatewayConfig:
    return settings.get_bot_gateway_config()


def get_bot_gateway(config: BotGatewayConfig = Depends(get_bot_gateway_config)) -> BotGatewayClient:
    return BotGatewayClient(config)
