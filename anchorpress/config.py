"""Publishing configuration — env-driven, passed explicitly.

Settings are read from ``ANCHORPRESS_*`` environment variables or a .env
file. There is no module-level instance: construct
``PublishSettings`` once and hand it to ``Publisher``, ``Verifier`` and the
adapter factories.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GATEWAY_TEMPLATES: list[str] = [
    "https://ipfs.io/ipfs/{cid}",
    "https://gateway.pinata.cloud/ipfs/{cid}",
    "https://cloudflare-ipfs.com/ipfs/{cid}",
]


class PublishSettings(BaseSettings):
    """Configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export ANCHORPRESS_LOG_LEVEL=DEBUG
        export ANCHORPRESS_LEDGER_PATH=/data/anchors.db
        export ANCHORPRESS_BATCH_SPACING_SECONDS=0

    List values are given as JSON::

        export ANCHORPRESS_GATEWAY_TEMPLATES='["https://dweb.link/ipfs/{cid}"]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ANCHORPRESS_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Local adapter storage
    store_path: Path = Path(".anchorpress/store")
    pin_registry_path: Path = Path(".anchorpress/pins.db")
    ledger_path: Path = Path(".anchorpress/ledger.db")
    manifest_path: Path = Path("publication-manifest.json")

    # Publication identity
    framework_name: str = "Euystacio"
    framework_version: str = "1.0"
    framework_identifier: str = "euystacio"  # tag attached to every pin
    anchored_by: str = "anchorpress"

    # Retrieval endpoints; each template must contain ``{cid}``
    gateway_templates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GATEWAY_TEMPLATES)
    )

    # Minimum delay between artifacts in a batch (third-party rate limits)
    batch_spacing_seconds: float = Field(default=2.0, ge=0)

    # Run the three verification checks on a thread pool
    verify_concurrently: bool = False

    @field_validator("gateway_templates")
    @classmethod
    def _templates_reference_cid(cls, value: list[str]) -> list[str]:
        for template in value:
            if "{cid}" not in template:
                raise ValueError(f"Gateway template must contain '{{cid}}': {template!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"
