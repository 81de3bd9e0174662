"""
Registry Loader

Walks a plugin root, parses every document's metadata header and builds
an immutable Registry. Loading is all-or-nothing: the first defect aborts
the load and no partial registry is returned.

Layout:

    <root>/
        .claude-plugin/plugin.json   (ignored here)
        agents/*.md
        commands/**/*.md
        rules/**/*.md
        skills/<skill>/SKILL.md      (+ supporting files)
        skills/*.md
"""

import re
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Dict, List, Tuple, Any, Iterable, Union

from .errors import LayoutError, MalformedHeaderError, RegistryIOError
from .frontmatter import CAPABILITY_KEYS, FIELD_KEYS, read_frontmatter
from .models import (
    Document, DocumentKind, ModelTier,
    MODEL_TIER_ALIASES, MODEL_TIER_INHERIT,
)
from .registry import Registry

logger = logging.getLogger("persona_registry.loader")

NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:-]*$")
MAX_NAME_LENGTH = 128

SKILL_FILENAME = "SKILL.md"
DOCUMENT_SUFFIX = ".md"

# Header keys mapped onto Document fields; everything else lands in metadata
RESERVED_KEYS = FIELD_KEYS

DEFAULT_IGNORE_DIRS = ("docs", "hooks", "scripts")


# =============================================================================
# Field parsing
# =============================================================================

def _require_text(meta: Dict[str, Any], key: str, path: Path) -> str:
    value = meta.get(key)
    if value is None:
        raise MalformedHeaderError(path, f"missing required field '{key}'")
    if not isinstance(value, str):
        raise MalformedHeaderError(
            path, f"field '{key}' must be text, got {type(value).__name__}"
        )
    value = value.strip()
    if not value:
        raise MalformedHeaderError(path, f"field '{key}' is empty")
    return value


def parse_name(meta: Dict[str, Any], path: Path) -> str:
    """Validate the lookup name (also used as an invocation token)."""
    name = _require_text(meta, "name", path)
    if len(name) > MAX_NAME_LENGTH:
        raise MalformedHeaderError(path, f"name is longer than {MAX_NAME_LENGTH} characters")
    if not NAME_PATTERN.match(name):
        raise MalformedHeaderError(
            path, f"invalid name '{name}' (letters, digits, '.', '_', ':' and '-' only)"
        )
    return name


def parse_capabilities(meta: Dict[str, Any], path: Path) -> frozenset:
    """Read ``tools`` as a comma-separated string or a list."""
    present = [k for k in CAPABILITY_KEYS if meta.get(k) is not None]
    if len(present) > 1:
        raise MalformedHeaderError(path, f"conflicting capability fields: {', '.join(present)}")
    if not present:
        return frozenset()

    raw = meta[present[0]]
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, list):
        items = []
        for item in raw:
            if not isinstance(item, str):
                raise MalformedHeaderError(path, f"'{present[0]}' entries must be text")
            items.append(item)
    else:
        raise MalformedHeaderError(
            path, f"'{present[0]}' must be a comma-separated string or a list"
        )

    return frozenset(item.strip() for item in items if item.strip())


def parse_model_tier(meta: Dict[str, Any], path: Path) -> Optional[ModelTier]:
    raw = meta.get("model")
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise MalformedHeaderError(path, "'model' must be a tier token")

    token = raw.strip().lower()
    if not token or token in MODEL_TIER_INHERIT:
        return None
    tier = MODEL_TIER_ALIASES.get(token)
    if tier is None:
        known = ", ".join(sorted(MODEL_TIER_ALIASES))
        raise MalformedHeaderError(path, f"unknown model tier '{raw}' (expected one of: {known})")
    return tier


def parse_document(
    kind: DocumentKind,
    path: Path,
    root: Path,
    resources: Iterable[Path] = (),
) -> Document:
    """
    Parse a single document file.

    Pure apart from reading ``path``; safe to run on worker threads.
    """
    relative = path.relative_to(root)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise RegistryIOError(relative, f"cannot read file: {e.strerror or e}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedHeaderError(relative, f"file is not valid UTF-8: {e}") from e

    meta, body = read_frontmatter(text, relative)

    color = meta.get("color")
    return Document(
        kind=kind,
        name=parse_name(meta, relative),
        description=_require_text(meta, "description", relative),
        tool_capabilities=parse_capabilities(meta, relative),
        model_tier=parse_model_tier(meta, relative),
        color_tag=str(color) if color is not None else None,
        body=body,
        source_path=relative.as_posix(),
        metadata={k: v for k, v in meta.items() if k not in RESERVED_KEYS},
        resources=tuple(sorted(r.relative_to(root).as_posix() for r in resources)),
    )


# =============================================================================
# Loader
# =============================================================================

# (kind, document path, supporting files)
DocumentSource = Tuple[DocumentKind, Path, Tuple[Path, ...]]


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


class RegistryLoader:
    """
    Builds a Registry from a plugin directory tree.

    Args:
        strict_layout: reject unrecognized top-level directories
        ignore_dirs: top-level directories skipped even in strict mode
        workers: parse files on this many threads (1 = inline)
    """

    def __init__(
        self,
        strict_layout: bool = True,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
        workers: int = 1,
    ):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.strict_layout = strict_layout
        self.ignore_dirs = frozenset(ignore_dirs)
        self.workers = workers

    def load(self, root_path: Union[str, Path]) -> Registry:
        """Load every document under ``root_path`` into a new Registry."""
        root = Path(root_path)
        started = time.monotonic()
        logger.info(f"Loading documents from {root}")

        sources = self.discover(root)

        if self.workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                documents = list(pool.map(lambda s: parse_document(s[0], s[1], root, s[2]), sources))
        else:
            documents = [parse_document(kind, path, root, res) for kind, path, res in sources]

        registry = Registry(documents, root=str(root))

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(f"Loaded {len(registry)} documents from {root} in {elapsed_ms:.1f}ms")
        return registry

    # =========================================================================
    # Discovery
    # =========================================================================

    def discover(self, root: Path) -> List[DocumentSource]:
        """List document files under ``root`` in a deterministic order."""
        if not root.exists():
            raise RegistryIOError(root, "plugin root does not exist")
        if not root.is_dir():
            raise RegistryIOError(root, "plugin root is not a directory")

        sources: List[DocumentSource] = []
        for entry in self._listdir(root):
            if _is_hidden(entry):
                continue
            if not entry.is_dir():
                logger.debug(f"Skipping top-level file {entry.name}")
                continue

            kind = DocumentKind.from_directory(entry.name)
            if kind is None:
                if entry.name in self.ignore_dirs:
                    logger.debug(f"Ignoring directory {entry.name}/")
                    continue
                if self.strict_layout:
                    known = ", ".join(k.directory for k in DocumentKind)
                    raise LayoutError(
                        entry.relative_to(root),
                        f"unrecognized directory (expected one of: {known})",
                    )
                logger.warning(f"Skipping unrecognized directory {entry.name}/")
                continue

            if kind is DocumentKind.SKILL:
                sources.extend(self._discover_skills(entry))
            else:
                sources.extend((kind, path, ()) for path in self._walk_markdown(entry))

        if not sources:
            logger.warning(f"No documents found under {root}")
        return sources

    def _discover_skills(self, skills_dir: Path) -> List[DocumentSource]:
        sources: List[DocumentSource] = []
        for entry in self._listdir(skills_dir):
            if _is_hidden(entry):
                continue
            if entry.is_file() and entry.suffix == DOCUMENT_SUFFIX:
                sources.append((DocumentKind.SKILL, entry, ()))
            elif entry.is_dir():
                sources.extend(self._discover_skill_dir(entry))
        return sources

    def _discover_skill_dir(self, directory: Path) -> List[DocumentSource]:
        """A skill directory holds SKILL.md plus optional supporting files."""
        skill_file = directory / SKILL_FILENAME
        if not skill_file.is_file():
            # Grouping directory; look one level further for skills
            sources: List[DocumentSource] = []
            for entry in self._listdir(directory):
                if entry.is_dir() and not _is_hidden(entry):
                    sources.extend(self._discover_skill_dir(entry))
            if not sources:
                logger.warning(f"Skill directory without {SKILL_FILENAME}: {directory}")
            return sources

        resources = tuple(
            p for p in self._walk(directory)
            if p != skill_file and p.is_file()
        )
        return [(DocumentKind.SKILL, skill_file, resources)]

    def _walk_markdown(self, directory: Path) -> List[Path]:
        paths = []
        for path in self._walk(directory):
            if not path.is_file():
                continue
            if path.suffix != DOCUMENT_SUFFIX:
                logger.debug(f"Skipping non-document file {path}")
                continue
            paths.append(path)
        return paths

    def _walk(self, directory: Path) -> List[Path]:
        """Recursive listing, sorted, skipping hidden entries."""
        found = []
        for entry in self._listdir(directory):
            if _is_hidden(entry):
                continue
            found.append(entry)
            if entry.is_dir():
                found.extend(self._walk(entry))
        return found

    @staticmethod
    def _listdir(directory: Path) -> List[Path]:
        try:
            return sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise RegistryIOError(directory, f"cannot list directory: {e.strerror or e}") from e


def load(root_path: Union[str, Path], **options: Any) -> Registry:
    """Load a registry with a one-off RegistryLoader."""
    return RegistryLoader(**options).load(root_path)
