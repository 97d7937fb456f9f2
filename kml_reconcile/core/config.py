"""Service configuration loaded from environment variables.

Azure Functions app settings (or ``local.settings.json`` for local dev)
are the source of truth.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so bad configuration surfaces at startup rather
    than in the middle of a deletion.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from kml_reconcile.core.constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_GIS_MAPS_TABLE,
    DEFAULT_MAX_BIND_PARAMETERS,
    DEFAULT_MAX_UPLOAD_BYTES,
    DEFAULT_USER_ACCESS_TABLE,
)
from kml_reconcile.core.exceptions import ReconcileError


class ConfigValidationError(ReconcileError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    """Immutable service configuration.

    Attributes:
        database_url: SQLAlchemy URL of the map catalog database.
        gis_maps_table: Name of the GIS map catalog table.
        gis_maps_schema: Optional schema qualifying the catalog tables.
        user_access_table: Table holding per-user ``access_level`` values.
        max_bind_parameters: Ceiling on bind parameters per statement.
        max_upload_bytes: Largest accepted upload in bytes.
    """

    database_url: str = DEFAULT_DATABASE_URL
    gis_maps_table: str = DEFAULT_GIS_MAPS_TABLE
    gis_maps_schema: str = ""
    user_access_table: str = DEFAULT_USER_ACCESS_TABLE
    max_bind_parameters: int = DEFAULT_MAX_BIND_PARAMETERS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    @classmethod
    def from_env(cls) -> ReconcileConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``MAX_BIND_PARAMETERS=abc``).
        """
        config = cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            gis_maps_table=os.getenv("GIS_MAPS_TABLE", DEFAULT_GIS_MAPS_TABLE),
            gis_maps_schema=os.getenv("GIS_MAPS_SCHEMA", ""),
            user_access_table=os.getenv("USER_ACCESS_TABLE", DEFAULT_USER_ACCESS_TABLE),
            max_bind_parameters=int(
                os.getenv("MAX_BIND_PARAMETERS", str(DEFAULT_MAX_BIND_PARAMETERS))
            ),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
        )
        _validate(config)
        return config


def _validate(config: ReconcileConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.database_url:
        raise ConfigValidationError("DATABASE_URL", config.database_url, "must not be empty")

    if not config.gis_maps_table:
        raise ConfigValidationError("GIS_MAPS_TABLE", config.gis_maps_table, "must not be empty")

    if not config.user_access_table:
        raise ConfigValidationError(
            "USER_ACCESS_TABLE",
            config.user_access_table,
            "must not be empty",
        )

    if config.max_bind_parameters < 1:
        raise ConfigValidationError(
            "MAX_BIND_PARAMETERS",
            config.max_bind_parameters,
            "must be >= 1",
        )

    if config.max_upload_bytes <= 0:
        raise ConfigValidationError(
            "MAX_UPLOAD_BYTES",
            config.max_upload_bytes,
            "must be > 0 (bytes)",
        )
