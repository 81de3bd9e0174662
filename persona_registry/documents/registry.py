"""
Document Registry

Immutable in-memory index of loaded documents, keyed by (kind, name).
Built once by the loader and shared read-only with any number of readers.
"""

from types import MappingProxyType
from typing import Optional, Dict, List, Tuple, Any, Iterable, Iterator, Union

from .errors import DuplicateNameError
from .models import Document, DocumentKind, NotFound

KindLike = Union[DocumentKind, str]


class Registry:
    """
    Read-only index of documents.

    The constructor is the single writer: it merges documents in the order
    given and rejects the first (kind, name) that repeats.
    """

    def __init__(self, documents: Iterable[Document] = (), root: Optional[str] = None):
        self.root = root

        index: Dict[Tuple[DocumentKind, str], Document] = {}
        for doc in documents:
            key = (doc.kind, doc.name)
            first = index.get(key)
            if first is not None:
                raise DuplicateNameError(
                    doc.kind.value, doc.name, doc.source_path, first_path=first.source_path
                )
            index[key] = doc

        by_kind: Dict[DocumentKind, Tuple[Document, ...]] = {}
        for kind in DocumentKind:
            docs = [d for (k, _), d in index.items() if k is kind]
            by_kind[kind] = tuple(sorted(docs, key=lambda d: d.name))

        self._index = MappingProxyType(index)
        self._by_kind = MappingProxyType(by_kind)
        self._documents = tuple(d for kind in DocumentKind for d in by_kind[kind])

    # =========================================================================
    # Queries
    # =========================================================================

    def lookup(self, kind: KindLike, name: str) -> Union[Document, NotFound]:
        """Exact-match retrieval. A miss is returned, never raised."""
        kind = DocumentKind.parse(kind)
        doc = self._index.get((kind, name))
        if doc is None:
            return NotFound(kind=kind, name=name)
        return doc

    def list(self, kind: KindLike) -> Tuple[Document, ...]:
        """All documents of a kind, sorted by name."""
        return self._by_kind[DocumentKind.parse(kind)]

    def names(self, kind: KindLike) -> List[str]:
        return [d.name for d in self.list(kind)]

    def stats(self) -> Dict[str, Any]:
        """Document counts per kind."""
        counts = {kind.directory: len(docs) for kind, docs in self._by_kind.items()}
        counts["total"] = len(self._documents)
        return counts

    # =========================================================================
    # Container protocol
    # =========================================================================

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, key: Any) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        kind, name = key
        try:
            kind = DocumentKind.parse(kind)
        except ValueError:
            return False
        return (kind, name) in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Registry):
            return NotImplemented
        return self._documents == other._documents

    def __repr__(self) -> str:
        counts = ", ".join(f"{k.directory}={len(v)}" for k, v in self._by_kind.items())
        return f"<Registry {counts}>"
