"""Configuration loading: API credentials and pipeline settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

import keyring

from shotlist.constants import (
    BUNDLE_FETCH_CONCURRENCY,
    COLLECTION_CODES,
    INTER_ENTITY_DELAY_SECONDS,
)
from shotlist.models import FilterConfig


SERVICE_NAME = "shotlist"

# credential name -> (keyring key, environment variable fallback)
CREDENTIALS: dict[str, tuple[str, str]] = {
    "gemini": ("gemini_api_key", "GEMINI_API_KEY"),
    "getty-key": ("getty_api_key", "GETTY_API_KEY"),
    "getty-secret": ("getty_api_secret", "GETTY_API_SECRET"),
}


def get_credential(name: str) -> str:
    """Get a credential: system keyring first, then environment variable.

    Args:
        name: One of ``gemini``, ``getty-key``, ``getty-secret``.

    Returns:
        The credential string.

    Raises:
        KeyError: If *name* is not a known credential.
        RuntimeError: If the credential is not configured anywhere, with
            actionable instructions.
    """
    key_name, env_var = CREDENTIALS[name]

    value = keyring.get_password(SERVICE_NAME, key_name)
    if value:
        return value

    value = os.environ.get(env_var)
    if value:
        return value

    raise RuntimeError(
        f"Credential '{name}' not found.\n"
        f"Set it with: shotlist config set-key {name} VALUE\n"
        f"Or: export {env_var}=..."
    )


@dataclass
class Credentials:
    """The three secrets the pipeline needs."""

    gemini_api_key: str
    getty_api_key: str
    getty_api_secret: str


def load_credentials() -> Credentials:
    """Resolve all credentials, raising on the first missing one."""
    return Credentials(
        gemini_api_key=get_credential("gemini"),
        getty_api_key=get_credential("getty-key"),
        getty_api_secret=get_credential("getty-secret"),
    )


@dataclass
class PipelineConfig:
    """Tunable pipeline settings with defaults matching the production workflow."""

    gemini_model: str = "gemini-2.5-flash"
    inter_entity_delay: float = INTER_ENTITY_DELAY_SECONDS
    bundle_concurrency: int = BUNDLE_FETCH_CONCURRENCY
    http_timeout: float = 30.0
    download_timeout: float = 120.0
    collections: dict[str, bool] = field(
        default_factory=lambda: {name: True for name in COLLECTION_CODES}
    )
    use_pmcarc: bool = True

    def default_filter(self) -> FilterConfig:
        """FilterConfig seeded from the configured toggles."""
        return FilterConfig(collections=dict(self.collections), use_pmcarc=self.use_pmcarc)


def load_pipeline_config(config_path: Path | None = None) -> PipelineConfig:
    """Load pipeline configuration from JSON, falling back to defaults.

    Reads ``config/shotlist_config.json`` when *config_path* is ``None``.
    Unknown keys are ignored; a missing file yields all defaults.

    Args:
        config_path: Optional explicit path to the JSON config.

    Returns:
        PipelineConfig with file values merged over defaults.
    """
    if config_path is None:
        config_path = Path("config/shotlist_config.json")

    data: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)

    field_names = {f.name for f in PipelineConfig.__dataclass_fields__.values()}
    kwargs = {k: v for k, v in data.items() if k in field_names}

    return PipelineConfig(**kwargs)
