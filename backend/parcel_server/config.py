"""
Parcel Server — Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before the app starts.
"""

from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST
    provide the database credentials, PAYMENT_GATEWAY_KEY and FB_SERVICE_KEY.
    """

    # ── Document Store ────────────────────────────────────────────────────
    # Either a full connection string, or Atlas credentials from which the
    # mongodb+srv URI is assembled (see `mongo_connection_uri`).
    mongodb_uri: Optional[str] = Field(
        default=None,
        description="Full MongoDB connection string; overrides DB_USER/DB_PASS",
    )
    db_user: str = Field(default="", description="Atlas database user")
    db_pass: str = Field(default="", description="Atlas database password")
    db_cluster_host: str = Field(default="cluster0.tnmpmcr.mongodb.net")
    database_name: str = Field(default="parcelDB")

    # Fail fast when the cluster is unreachable instead of the driver's 30s default
    mongo_server_selection_timeout_ms: int = Field(default=5000, ge=100, le=60000)

    # ── Payment Provider (Stripe) ─────────────────────────────────────────
    payment_gateway_key: str = Field(
        default="",
        description="Stripe secret key used to create payment intents",
    )
    payment_currency: str = Field(default="usd", min_length=3, max_length=3)

    # ── Identity Provider (Firebase Admin) ────────────────────────────────
    # Base64-encoded service account JSON, so it fits in a single env var
    fb_service_key: str = Field(
        default="",
        description="Base64-encoded Firebase service account JSON",
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("payment_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.lower()

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def mongo_connection_uri(self) -> str:
        """
        What:  The URI handed to AsyncMongoClient.
        How:   MONGODB_URI wins; otherwise an Atlas SRV URI is built from
               DB_USER / DB_PASS / DB_CLUSTER_HOST (credentials URL-escaped).
        """
        if self.mongodb_uri:
            return self.mongodb_uri
        if not self.db_user:
            return "mongodb://localhost:27017"
        return (
            f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
            f"@{self.db_cluster_host}/?retryWrites=true&w=majority&appName=Cluster0"
        )

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the external-provider secrets are configured.
        When:  Called during app startup (lifespan).
        Raises ValueError listing every missing setting.
        """
        errors = []
        if not self.payment_gateway_key:
            errors.append("PAYMENT_GATEWAY_KEY is not set; payment intents will fail.")
        if not self.fb_service_key:
            errors.append("FB_SERVICE_KEY is not set; every authenticated route will return 401.")
        if not self.mongodb_uri and not self.db_user:
            errors.append("Neither MONGODB_URI nor DB_USER/DB_PASS is set; using localhost.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
