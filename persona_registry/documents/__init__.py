"""
Document Registry

Loads agents, commands, skills and rules from a plugin tree.
Each document is a Markdown file with a metadata header; the registry
indexes them by (kind, name) and never changes after load.
"""

from .errors import (
    LoadError, MalformedHeaderError, DuplicateNameError,
    LayoutError, RegistryIOError,
)
from .models import Document, DocumentKind, ModelTier, NotFound
from .registry import Registry
from .loader import RegistryLoader, load
from .manifest import PluginManifest, read_manifest

__all__ = [
    "Document",
    "DocumentKind",
    "ModelTier",
    "NotFound",
    "Registry",
    "RegistryLoader",
    "load",
    "LoadError",
    "MalformedHeaderError",
    "DuplicateNameError",
    "LayoutError",
    "RegistryIOError",
    "PluginManifest",
    "read_manifest",
]
