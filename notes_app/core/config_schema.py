"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    DatabaseSchema     → database.yaml
    LoggingSchema      → logging.yaml
    FeaturesSchema     → features.yaml
    SecuritySchema     → security.yaml
    StorageSchema      → storage.yaml
    ConcurrencySchema  → concurrency.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class TimeoutsSchema(_StrictBase):
    external_api: int
    health_check: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema


# =============================================================================
# database.yaml
# =============================================================================


class DatabaseSchema(_StrictBase):
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    api_detailed_errors: bool
    api_request_logging: bool
    security_startup_checks_enabled: bool
    storage_static_mount_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class JwtSchema(_StrictBase):
    algorithm: str
    access_token_expire_minutes: int
    audience: str | None = None


class SecretsValidationSchema(_StrictBase):
    jwt_secret_min_length: int


class CorsEnforcementSchema(_StrictBase):
    enforce_in_production: bool


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    secrets_validation: SecretsValidationSchema
    cors: CorsEnforcementSchema


# =============================================================================
# storage.yaml
# =============================================================================


class LocalStorageSchema(_StrictBase):
    uploads_dir: str
    url_prefix: str


class RemoteStorageSchema(_StrictBase):
    api_base_url: str
    cloud_name: str
    folder: str
    max_width: int
    max_height: int


class StorageSchema(_StrictBase):
    backend: Literal["local", "remote"]
    max_upload_bytes: int = Field(gt=0)
    allowed_content_types: list[str]
    local: LocalStorageSchema
    remote: RemoteStorageSchema


# =============================================================================
# concurrency.yaml
# =============================================================================


class ThreadPoolSchema(_StrictBase):
    max_workers: int


class SemaphoresSchema(_StrictBase):
    external_api: int


class ConcurrencySchema(_StrictBase):
    thread_pool: ThreadPoolSchema
    semaphores: SemaphoresSchema
