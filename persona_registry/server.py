"""
Persona Registry Server

Read-only FastAPI application over a loaded document registry.
"""

import logging
from typing import Optional
from pathlib import Path

from fastapi import FastAPI

from . import __version__
from .config import AppConfig, load_config, configure_logging
from .documents import Registry, read_manifest
from .documents.routes import create_document_router

logger = logging.getLogger("persona_registry.server")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(config: AppConfig = None, registry: Optional[Registry] = None) -> FastAPI:
    """
    Create FastAPI application.

    The registry is loaded here, before the app exists, so a defective
    plugin tree stops startup instead of serving a partial registry.
    """
    config = config or AppConfig()
    root = Path(config.registry.root)

    if registry is None:
        registry = config.registry.create_loader().load(root)

    manifest = read_manifest(root)

    app = FastAPI(
        title="Persona Registry",
        description="Read-only registry of agents, commands, skills and rules",
        version=__version__,
    )
    app.state.registry = registry

    @app.get("/")
    async def root_info():
        """Service info and document counts."""
        return {
            "service": "persona-registry",
            "version": __version__,
            "plugin": manifest.model_dump() if manifest else None,
            "documents": registry.stats(),
        }

    @app.get("/health")
    async def health():
        return {"status": "ok", "documents": len(registry)}

    app.include_router(create_document_router(registry))

    logger.info(f"Serving {len(registry)} documents from {root}")
    return app


# =============================================================================
# Main
# =============================================================================

def main(config_path: str = None, host: str = None, port: int = None):
    """Run the Persona Registry server."""
    import uvicorn

    config = load_config(config_path) if config_path else AppConfig()
    configure_logging(config.logging.level)

    app = create_app(config)

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
