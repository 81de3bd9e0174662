"""
Configuration management for Persona Registry.

Supports YAML configuration with environment variable expansion.
"""

import os
import logging
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, List, Any

import yaml

from .documents.loader import DEFAULT_IGNORE_DIRS, RegistryLoader


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8767


@dataclass
class RegistryConfig:
    """Where and how documents are loaded."""
    root: str = "."
    strict_layout: bool = True
    ignore_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    workers: int = 1

    def create_loader(self) -> RegistryLoader:
        return RegistryLoader(
            strict_layout=self.strict_layout,
            ignore_dirs=self.ignore_dirs,
            workers=self.workers,
        )


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    """Root configuration for Persona Registry."""
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Optional[Path] = None


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values."""
    if isinstance(value, str):
        # Match ${VAR} or $VAR patterns
        pattern = r'\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)'

        def replace(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return re.sub(pattern, replace, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(v) for v in value]
    return value


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(path: str | Path) -> AppConfig:
    """Load configuration from YAML file."""
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    # Expand environment variables
    data = expand_env_vars(raw)

    # Registry root is relative to the config file
    registry_data = data.get("registry") or {}
    root = Path(str(registry_data.get("root", ".")))
    if not root.is_absolute():
        root = path.parent / root

    registry = RegistryConfig(
        root=str(root),
        strict_layout=_as_bool(registry_data.get("strict_layout"), True),
        ignore_dirs=list(registry_data.get("ignore_dirs", DEFAULT_IGNORE_DIRS) or []),
        workers=int(registry_data.get("workers", 1)),
    )

    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=int(server_data.get("port", 8767)),
    )

    logging_data = data.get("logging") or {}
    logging_config = LoggingConfig(
        level=str(logging_data.get("level", "INFO")).upper(),
    )

    return AppConfig(
        registry=registry,
        server=server,
        logging=logging_config,
        source=path,
    )


def create_default_config() -> str:
    """Generate default configuration YAML."""
    return """# Persona Registry Configuration

registry:
  # Plugin root holding agents/, commands/, skills/ and rules/
  # (relative paths resolve against this file)
  root: .
  # Reject top-level directories that aren't a document kind
  strict_layout: true
  ignore_dirs:
    - docs
    - hooks
    - scripts
  # Parse files on this many threads
  workers: 1

server:
  host: 127.0.0.1
  port: 8767

logging:
  level: INFO
"""


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once, at process entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
