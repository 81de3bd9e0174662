"""
Document Models

Pydantic models for registry documents and the enums that classify them.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional, Dict, FrozenSet, Mapping, Tuple, Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentKind(str, Enum):
    """The closed set of document kinds, one per plugin directory."""
    AGENT = "agent"
    COMMAND = "command"
    SKILL = "skill"
    RULE = "rule"

    @property
    def directory(self) -> str:
        """Directory name under the plugin root (e.g. ``agents``)."""
        return f"{self.value}s"

    @classmethod
    def parse(cls, value: Union[str, "DocumentKind"]) -> "DocumentKind":
        """Accept a kind, its value, or its directory name."""
        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        for kind in cls:
            if token in (kind.value, kind.directory):
                return kind
        raise ValueError(f"Unknown document kind: {value!r}")

    @classmethod
    def from_directory(cls, dirname: str) -> Optional["DocumentKind"]:
        for kind in cls:
            if kind.directory == dirname:
                return kind
        return None


class ModelTier(str, Enum):
    """Target model tier for an agent."""
    FAST = "fast"
    BALANCED = "balanced"
    DEEP = "deep"


# Header tokens accepted for each tier
MODEL_TIER_ALIASES: Dict[str, ModelTier] = {
    "fast": ModelTier.FAST,
    "haiku": ModelTier.FAST,
    "balanced": ModelTier.BALANCED,
    "sonnet": ModelTier.BALANCED,
    "deep": ModelTier.DEEP,
    "opus": ModelTier.DEEP,
}

# Tokens meaning "use the host's default"
MODEL_TIER_INHERIT = {"inherit", "default"}


def _freeze(value: Any) -> Any:
    """Read-only copy: mappings become proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, set):
        return frozenset(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Plain dicts and lists again, for JSON output."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (tuple, frozenset)):
        return [_thaw(v) for v in value]
    return value


class Document(BaseModel):
    """A single agent, command, skill or rule loaded from the plugin tree."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    kind: DocumentKind
    name: str = Field(..., description="Lookup key, unique within kind")
    description: str
    tool_capabilities: FrozenSet[str] = Field(default_factory=frozenset)
    model_tier: Optional[ModelTier] = None
    color_tag: Optional[str] = Field(None, description="Display hint only")
    body: str = Field("", description="Verbatim text after the header")

    source_path: str = Field("", description="Path relative to the plugin root")
    metadata: Mapping[str, Any] = Field(default_factory=lambda: MappingProxyType({}))
    resources: Tuple[str, ...] = ()

    @field_validator("metadata", mode="after")
    @classmethod
    def _freeze_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    def content_hash(self) -> str:
        """SHA256 hash of the body."""
        return hashlib.sha256(self.body.encode()).hexdigest()

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly view without the body."""
        return {
            "kind": self.kind.value,
            "name": self.name,
            "description": self.description,
            "tools": sorted(self.tool_capabilities),
            "model": self.model_tier.value if self.model_tier else None,
            "color": self.color_tag,
            "source_path": self.source_path,
        }

    def to_dict(self, include_body: bool = True) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        data = self.summary()
        data["metadata"] = _thaw(self.metadata)
        data["resources"] = list(self.resources)
        data["hash"] = self.content_hash()
        if include_body:
            data["body"] = self.body
        return data


@dataclass(frozen=True)
class NotFound:
    """Result of a lookup miss. Falsy, so ``if doc:`` reads naturally."""
    kind: DocumentKind
    name: str

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.kind.value} '{self.name}' not found"
