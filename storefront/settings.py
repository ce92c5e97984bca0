from __future__ import annotations
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict
import json

def _parse_cors(v: Optional[str | List[str]]) -> List[str]:
    """
    Accept JSON array (e.g. '["http://localhost:3000"]') or
    comma-separated string ('http://localhost:3000,http://127.0.0.1:3000').
    """
    if v is None:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    if isinstance(v, list):
        return v
    s = v.strip()
    if not s:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    # try JSON first
    try:
        parsed = json.loads(s)
        if isinstance(parsed, list) and all(isinstance(x, str) for x in parsed):
            return parsed
    except ValueError:
        pass
    # fallback: comma separated
    return [p.strip() for p in s.split(",") if p.strip()]


class PlatformConfig(BaseModel):
    """Everything the commercetools client needs, passed in explicitly."""

    project_key: str
    client_id: str
    client_secret: str
    api_url: str
    auth_url: str
    scopes: Tuple[str, ...] = ()
    timeout: float = 30.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",   # ignore unknown env keys instead of raising
    )

    # --- API ---
    cors_origins_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("CORS_ORIGINS",)
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL",))

    # --- commercetools ---
    ct_project_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("CT_PROJECT_KEY",))
    ct_client_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("CT_CLIENT_ID",))
    ct_client_secret: Optional[str] = Field(default=None, validation_alias=AliasChoices("CT_CLIENT_SECRET",))
    ct_api_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("CT_API_URL",))
    ct_auth_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("CT_AUTH_URL",))
    # space separated, e.g. "view_products:my-project manage_orders:my-project"
    ct_scopes: str = Field(default="", validation_alias=AliasChoices("CT_SCOPES",))
    http_timeout: float = Field(default=30.0, validation_alias=AliasChoices("HTTP_TIMEOUT",))

    # --- cart / orders ---
    # key of the shopping list that backs the cart; unset = first list returned
    cart_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("CT_CART_KEY",))
    order_list_limit: int = Field(default=200, validation_alias=AliasChoices("ORDER_LIST_LIMIT",))
    default_currency: str = Field(default="USD", validation_alias=AliasChoices("DEFAULT_CURRENCY",))
    default_country: str = Field(default="US", validation_alias=AliasChoices("DEFAULT_COUNTRY",))

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors(self.cors_origins_raw)

    def platform_config(self) -> PlatformConfig:
        required = {
            "CT_PROJECT_KEY": self.ct_project_key,
            "CT_CLIENT_ID": self.ct_client_id,
            "CT_CLIENT_SECRET": self.ct_client_secret,
            "CT_API_URL": self.ct_api_url,
            "CT_AUTH_URL": self.ct_auth_url,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise RuntimeError(
                f"Missing environment variables: {', '.join(missing)}. "
                "Set them in your .env."
            )
        return PlatformConfig(
            project_key=self.ct_project_key,
            client_id=self.ct_client_id,
            client_secret=self.ct_client_secret,
            api_url=self.ct_api_url.rstrip("/"),
            auth_url=self.ct_auth_url.rstrip("/"),
            scopes=tuple(self.ct_scopes.split()),
            timeout=self.http_timeout,
        )

# singleton
settings = Settings()
