"""Settings resolution shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

from anchorpress.config import PublishSettings
from anchorpress.observability import configure_logging


def resolve_settings(data_dir: Path | None = None, **overrides: object) -> PublishSettings:
    """Load settings from the environment, relocating local stores under *data_dir*.

    Also installs the CLI log handler at the configured level.
    """
    updates: dict[str, object] = {k: v for k, v in overrides.items() if v is not None}
    if data_dir is not None:
        updates.update(
            store_path=data_dir / "store",
            pin_registry_path=data_dir / "pins.db",
            ledger_path=data_dir / "ledger.db",
        )
    settings = PublishSettings(**updates)
    configure_logging(settings.log_level)
    return settings
