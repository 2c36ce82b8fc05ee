"""Virtual drive configuration settings.

DriveSettings is the single configuration object accepted by create_app()
and build_storage(). ``from_env()`` is the only place that reads os.environ;
tests construct DriveSettings directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from .protocols import FileStorage

STORAGE_TYPES = ("memory", "supabase")

_TRUTHY = {"1", "true", "yes", "on"}

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
)


@dataclass(frozen=True, slots=True)
class DriveSettings:
    """Configuration for the virtual drive service.

    Defaults describe local development with volatile in-memory storage.
    ``storage_type="supabase"`` requires supabase_url and
    supabase_service_role_key.
    """

    # ── Storage ────────────────────────────────────────────────────
    storage_type: str = "memory"
    """One of: memory, supabase."""

    use_sample_data: bool = False
    """Seed the in-memory backend with the sample tree."""

    # ── Supabase ───────────────────────────────────────────────────
    supabase_url: str = ""
    """Supabase project URL (e.g. https://xyz.supabase.co)."""

    supabase_service_role_key: str = ""
    """Supabase service-role key for PostgREST calls. Never log this."""

    supabase_schema: str = "public"

    tenant_id: str = ""
    """Tenant scope for every durable storage call. Empty means "default"."""

    # ── HTTP ───────────────────────────────────────────────────────
    cors_origins: tuple[str, ...] = _DEFAULT_CORS_ORIGINS

    # ── Logging ────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_durable(self) -> bool:
        return self.storage_type == "supabase"

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if self.storage_type not in STORAGE_TYPES:
            errors.append(
                f"storage_type must be one of {', '.join(STORAGE_TYPES)} "
                f"(got {self.storage_type!r})"
            )
        if self.is_durable:
            if not self.supabase_url:
                errors.append("supabase: supabase_url is required")
            if not self.supabase_service_role_key:
                errors.append("supabase: supabase_service_role_key is required")
        return errors

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> DriveSettings:
        """Build settings from environment variables.

        ``env`` defaults to os.environ. Unset variables keep the field
        defaults.
        """
        if env is None:
            env = dict(os.environ)

        cors_raw = env.get("CORS_ORIGINS", "")
        cors = (
            tuple(o.strip() for o in cors_raw.split(",") if o.strip())
            if cors_raw
            else _DEFAULT_CORS_ORIGINS
        )

        return cls(
            storage_type=env.get("STORAGE_TYPE", "memory").strip().lower() or "memory",
            use_sample_data=env.get("USE_SAMPLE_DATA", "").strip().lower() in _TRUTHY,
            supabase_url=env.get("SUPABASE_URL", ""),
            supabase_service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            supabase_schema=env.get("SUPABASE_SCHEMA", "public") or "public",
            tenant_id=env.get("TENANT_ID", ""),
            cors_origins=cors,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "json"),
        )


class SettingsError(ValueError):
    """Raised when settings cannot produce a working storage backend."""


def build_storage(
    settings: DriveSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> FileStorage:
    """Construct the storage backend selected by ``settings``.

    Raises:
        SettingsError: If the settings are invalid.
    """
    errors = settings.validate()
    if errors:
        raise SettingsError("; ".join(errors))

    if settings.is_durable:
        from .db import SupabaseClient, SupabaseFileStorage

        client = SupabaseClient(
            supabase_url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
            default_schema=settings.supabase_schema,
            http_client=http_client,
        )
        return SupabaseFileStorage(client, tenant_id=settings.tenant_id or None)

    from .inmemory import InMemoryFileStorage

    return InMemoryFileStorage(use_sample_data=settings.use_sample_data)
