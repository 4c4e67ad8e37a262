"""
Store configuration for chanstore.

Defines the blob location, key namespacing and persistence behavior.
Values come from defaults, an optional JSON file, then CHANSTORE_*
environment variables (a .env file is read with python-dotenv).
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple, Union

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from chanstore.utils.logger import get_logger

logger = get_logger("config")

ENV_PREFIX = "CHANSTORE_"


class StoreConfig(BaseModel):
    """Store-wide configuration parameters"""

    model_config = ConfigDict(frozen=True)

    # Durable blob
    blob_key: str = "@MetaMask:InstaPay"  # External key holding the whole snapshot

    # Key namespacing
    client_prefix: str = "INDRA_CLIENT_CF_CORE"  # Umbrella over every client sub-store
    namespace_tag: str = "CF_NODE"  # Prefix of this store's keys: "CF_NODE:<path>"
    container_suffixes: Tuple[str, ...] = ("channel", "appInstanceIdToProposedAppInstance")

    # Persistence
    batch_writes: bool = False  # One persist per set() call instead of per pair
    backend: Literal["memory", "file", "sqlite"] = "memory"
    data_dir: Path = Path("data")

    log_level: str = "INFO"

    @field_validator("blob_key", "client_prefix", "namespace_tag")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("container_suffixes", mode="before")
    @classmethod
    def _split_suffixes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(s.strip() for s in value.split(",") if s.strip())
        return value

    @field_validator("container_suffixes")
    @classmethod
    def _suffixes_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not s for s in value):
            raise ValueError("container suffixes must be non-empty strings")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def namespace(self) -> str:
        """Tag applied to every path, as in "<namespace>:<path>"."""
        return self.namespace_tag


def _env_overrides(env_file: Optional[Union[str, Path]]) -> Dict[str, str]:
    """Collect CHANSTORE_* settings; real environment wins over the .env file."""
    dotenv_path = str(env_file) if env_file else find_dotenv(usecwd=True)
    values: Dict[str, Optional[str]] = dict(dotenv_values(dotenv_path)) if dotenv_path else {}
    values.update(os.environ)

    overrides = {}
    for name, value in values.items():
        if name.startswith(ENV_PREFIX) and value is not None:
            overrides[name[len(ENV_PREFIX):].lower()] = value
    return overrides


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
) -> StoreConfig:
    """
    Load configuration from file and environment, or use defaults.

    Args:
        config_path: Optional path to a JSON config file
        env_file: Optional .env file; defaults to the nearest one from cwd

    Returns:
        StoreConfig instance

    Raises:
        pydantic.ValidationError: if a setting has an invalid value
    """
    settings: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        settings.update(json.loads(path.read_text(encoding="utf-8")))
        logger.debug(f"Loaded config file {path}")

    overrides = _env_overrides(env_file)
    known = {k: v for k, v in overrides.items() if k in StoreConfig.model_fields}
    if known:
        logger.debug(f"Environment overrides: {sorted(known)}")
    settings.update(known)

    return StoreConfig(**settings)
