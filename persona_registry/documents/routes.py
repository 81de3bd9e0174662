"""
Document Registry API Routes

Read-only FastAPI router over a loaded Registry.
"""

from fastapi import APIRouter, HTTPException, Query

from .models import DocumentKind
from .registry import Registry


def _parse_kind(kind: str) -> DocumentKind:
    try:
        return DocumentKind.parse(kind)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def create_document_router(registry: Registry) -> APIRouter:
    """Create FastAPI router for document lookups."""

    router = APIRouter(prefix="/v1/documents", tags=["documents"])

    @router.get("")
    async def registry_stats():
        """Document counts per kind."""
        return registry.stats()

    @router.get("/{kind}")
    async def list_documents(kind: str):
        """List documents of a kind, sorted by name (bodies omitted)."""
        doc_kind = _parse_kind(kind)
        documents = registry.list(doc_kind)
        return {
            "kind": doc_kind.value,
            "documents": [d.summary() for d in documents],
            "count": len(documents),
        }

    @router.get("/{kind}/{name}")
    async def get_document(
        kind: str,
        name: str,
        include_body: bool = Query(default=True),
    ):
        """Get a single document by exact name."""
        result = registry.lookup(_parse_kind(kind), name)
        if not result:
            raise HTTPException(status_code=404, detail=str(result))
        return result.to_dict(include_body=include_body)

    return router
