"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``LedgerConfig`` built from
    the YAML configuration set and its seed file.

Architecture position:
    Configuration -- sits above ``ledger_kernel`` and below
    ``ledger_modules`` and the CLI.  The kernel MUST NEVER import from
    ``ledger_config``; the policy objects it carries are kernel types.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Explicit path beats the ``LEDGER_CONFIG_PATH`` environment
      variable, which beats the packaged default set.

Failure modes:
    - ``ConfigurationError`` -- missing file, invalid YAML or invalid
      values.
"""

from __future__ import annotations

import os
from pathlib import Path

from ledger_config.loader import load_config
from ledger_config.schema import DEFAULT_COLLECTION_NAMES, LedgerConfig

CONFIG_PATH_ENV = "LEDGER_CONFIG_PATH"

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
_DEFAULT_CONFIG_FILE = _DEFAULT_CONFIG_DIR / "default.yaml"


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Pick the configuration file: argument, then environment, then default."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return _DEFAULT_CONFIG_FILE


def get_active_config(path: str | Path | None = None) -> LedgerConfig:
    """The ONLY public configuration entrypoint.

    Non-goals:
        - Does NOT cache; callers hold the returned config for the life
          of the services they build from it.

    Raises:
        ConfigurationError: If the file cannot be loaded or validated.
    """
    return load_config(resolve_config_path(path))


__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_COLLECTION_NAMES",
    "LedgerConfig",
    "get_active_config",
    "resolve_config_path",
]
