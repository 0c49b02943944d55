# listing_admin/core/config.py
from __future__ import annotations
import json
from typing import Annotated, Optional, List, Literal
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator
from starlette.middleware.cors import CORSMiddleware


class Settings(BaseSettings):
    # Pydantic Settings
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",          # ignore unknown env keys safely
        case_sensitive=False,
        populate_by_name=True,
    )

    # --- App ---
    app_name: str = Field("Listing Admin", alias="APP_NAME")
    api_prefix: str = Field("/api", alias="API_PREFIX")
    port: int = Field(8000, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # --- Security / JWT ---
    admin_password: str = Field("change-me", alias="ADMIN_PASSWORD")
    secret_key: str = Field("dev-super-secret-change-me", alias="SECRET_KEY")
    algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(720, alias="ACCESS_EXPIRE_MIN")

    # --- Database ---
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")  # full URL override
    db_user: str = Field("listings", alias="DB_USER")
    db_password: str = Field("listingspw", alias="DB_PASSWORD")
    db_host: str = Field("127.0.0.1", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_name: str = Field("listings_db", alias="DB_NAME")

    # --- Object storage (S3 compatible) ---
    storage_endpoint_url: Optional[str] = Field(None, alias="STORAGE_ENDPOINT_URL")
    storage_access_key: str = Field("", alias="STORAGE_ACCESS_KEY")
    storage_secret_key: str = Field("", alias="STORAGE_SECRET_KEY")
    storage_region: str = Field("us-east-1", alias="STORAGE_REGION")
    storage_bucket: str = Field("property-images", alias="STORAGE_BUCKET")
    storage_public_base: str = Field("", alias="STORAGE_PUBLIC_BASE")
    storage_key_prefix: str = Field("", alias="STORAGE_KEY_PREFIX")

    # --- Listings ---
    upload_workers: int = Field(4, alias="UPLOAD_WORKERS")
    purge_images_on_delete: bool = Field(False, alias="PURGE_IMAGES_ON_DELETE")
    list_order: Literal["asc", "desc"] = Field("desc", alias="LIST_ORDER")

    # --- CORS ---
    # Comma-separated in .env or leave default list
    admin_origins: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        alias="ADMIN_ORIGINS",
    )
    public_origins: Annotated[List[str], NoDecode] = Field(default=["*"], alias="PUBLIC_ORIGINS")

    @field_validator("admin_origins", "public_origins", mode="before")
    @classmethod
    def _parse_origins(cls, v):
        # Accept "a,b,c" or JSON array; pass lists through.
        if v is None:
            return []
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                return json.loads(s)
            return [p.strip() for p in s.split(",") if p.strip()]
        return v

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            "postgresql+psycopg2://"
            f"{self.db_user}:{quote_plus(self.db_password)}@"
            f"{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def public_prefix(self) -> str:
        return f"{self.api_prefix.rstrip('/')}/public"


settings = Settings()


# --- CORS helpers ---
class SplitCorsMiddleware:
    """
    Routes each request to one of two CORS policies by path:
    the public listing gets read-only access from ``public_origins``,
    everything else gets full access from ``admin_origins``.
    """

    def __init__(self, app, public_prefix: str, public_origins, admin_origins):
        self.app = app
        self.public_prefix = public_prefix
        self.public = CORSMiddleware(
            app,
            allow_origins=list(public_origins),
            allow_credentials=False,
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )
        self.admin = CORSMiddleware(
            app,
            allow_origins=list(admin_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path") or ""
        if path == self.public_prefix or path.startswith(self.public_prefix + "/"):
            return await self.public(scope, receive, send)
        return await self.admin(scope, receive, send)


def configure_cors(app, conf: Settings = settings):
    app.add_middleware(
        SplitCorsMiddleware,
        public_prefix=conf.public_prefix,
        public_origins=conf.public_origins,
        admin_origins=conf.admin_origins,
    )
