"""
Persona Registry - Loader and index for prompt plugin documents

Loads the agents, commands, skills and rules of a prompt plugin into an
immutable registry that a host can query by (kind, name).
"""

__version__ = "0.1.0"

from .documents import (
    Document, DocumentKind, ModelTier, NotFound,
    Registry, RegistryLoader, load,
    LoadError, MalformedHeaderError, DuplicateNameError,
    LayoutError, RegistryIOError,
)
from .config import AppConfig, load_config

__all__ = [
    "__version__",
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
    "AppConfig",
    "load_config",
]
