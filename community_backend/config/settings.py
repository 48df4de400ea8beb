from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class BotGatewayConfig(BaseModel):
    """Immutable connection settings for the Discord bot gateway."""
    base_url: str
    nickname_url: str
    private_key: str
    token_ttl: int = 60
    algorithm: str = "RS256"

    model_config = ConfigDict(frozen=True)


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Bypasses RLS, preferred for server-side writes

    # Discord bot gateway
    discord_bot_base_url: str = "http://localhost:8787"
    discord_bot_nickname_url: Optional[str] = None  # Defaults to {base}/guild/member
    discord_bot_private_key: str = ""  # PEM encoded RSA key
    discord_bot_token_ttl: int = 60  # seconds

    # App
    app_name: str = "community-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_bot_gateway_config(self) -> BotGatewayConfig:
        base_url = self.discord_bot_base_url.rstrip("/")
        return BotGatewayConfig(
            base_url=base_url,
            nickname_url=self.discord_bot_nickname_url or f"{base_url}/guild/member",
            private_key=self.discord_bot_private_key.replace("\\n", "\n"),
            token_ttl=self.discord_bot_token_ttl,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
