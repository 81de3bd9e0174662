"""
Plugin manifest.

``.claude-plugin/plugin.json`` declares the plugin's identity. The loader
never reads it; the CLI and HTTP API show it so operators can tell which
plugin a registry came from.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger("persona_registry.manifest")

MANIFEST_PATH = Path(".claude-plugin") / "plugin.json"


class PluginManifest(BaseModel):
    """Plugin identity. Unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: Optional[str] = None
    description: Optional[str] = None


def read_manifest(root: Union[str, Path]) -> Optional[PluginManifest]:
    """Read the manifest under ``root``, or None if absent or unusable."""
    path = Path(root) / MANIFEST_PATH
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return PluginManifest.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable plugin manifest {path}: {e}")
        return None
