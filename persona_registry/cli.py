"""
Persona Registry CLI

Command-line interface for validating and browsing a plugin tree.
"""

import sys
import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from . import __version__
from .config import AppConfig, load_config, create_default_config, configure_logging
from .documents import DocumentKind, LoadError, Registry, read_manifest


console = Console()

KIND_CHOICE = click.Choice(
    [k.value for k in DocumentKind] + [k.directory for k in DocumentKind],
    case_sensitive=False,
)


@click.group()
@click.version_option(__version__, prog_name="persona-registry")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config file")
@click.option("--log-level", default=None, help="Override logging level (DEBUG, INFO, ...)")
@click.pass_context
def cli(ctx, config_path: str, log_level: str):
    """Persona Registry - load and inspect agents, commands, skills and rules"""
    ctx.ensure_object(dict)

    config = AppConfig()
    if config_path:
        if not Path(config_path).exists():
            raise click.BadParameter(f"Config file not found: {config_path}", param_hint="--config")
        config = load_config(config_path)

    if log_level:
        config.logging.level = log_level.upper()
    configure_logging(config.logging.level)

    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = config


def _load_registry(ctx, root: Optional[str]) -> Registry:
    """Load from ROOT or the configured root; exit 1 on any load error."""
    config: AppConfig = ctx.obj["config"]
    root_path = Path(root) if root else Path(config.registry.root)

    try:
        return config.registry.create_loader().load(root_path)
    except LoadError as e:
        console.print(f"[red]✗[/red] {type(e).__name__}: {escape(str(e))}")
        sys.exit(1)


def _truncate(text: str, width: int = 60) -> str:
    text = " ".join(text.split())
    return text[:width] + "..." if len(text) > width else text


# =============================================================================
# Commands
# =============================================================================

@cli.command()
def init():
    """Initialize a new configuration file."""
    config_path = Path("registry.yaml")

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    config_path.write_text(create_default_config())
    console.print(f"[green]✓[/green] Created {config_path}")
    console.print("\nPoint registry.root at your plugin, then run:")
    console.print("  [cyan]persona-registry -c registry.yaml validate[/cyan]")


@cli.command()
@click.argument("root", required=False, type=click.Path())
@click.pass_context
def validate(ctx, root: Optional[str]):
    """Load every document and report counts per kind."""
    registry = _load_registry(ctx, root)
    stats = registry.stats()

    manifest = read_manifest(registry.root)
    identity = "[dim]no plugin manifest[/dim]"
    if manifest:
        identity = f"{manifest.name} {manifest.version or ''}".strip()

    lines = [f"[bold green]Registry valid[/bold green]\n", f"Plugin: {identity}"]
    for kind in DocumentKind:
        lines.append(f"{kind.directory.capitalize()}: {stats[kind.directory]}")
    lines.append(f"Total: {stats['total']}")

    console.print(Panel("\n".join(lines), title="✓ Validation"))


@cli.command("list")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("root", required=False, type=click.Path())
@click.pass_context
def list_documents(ctx, kind: str, root: Optional[str]):
    """List documents of KIND, sorted by name."""
    registry = _load_registry(ctx, root)
    doc_kind = DocumentKind.parse(kind)
    documents = registry.list(doc_kind)

    if not documents:
        console.print(f"[yellow]No {doc_kind.directory} found[/yellow]")
        return

    table = Table(title=doc_kind.directory.capitalize())
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Model")
    table.add_column("Tools")
    table.add_column("Description")

    for doc in documents:
        table.add_row(
            doc.name,
            doc.model_tier.value if doc.model_tier else "-",
            ", ".join(sorted(doc.tool_capabilities)) or "-",
            escape(_truncate(doc.description)),
        )

    console.print(table)
    console.print(f"\nTotal: {len(documents)} {doc_kind.directory}")


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("name")
@click.argument("root", required=False, type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@click.option("--no-body", is_flag=True, help="Omit the document body")
@click.pass_context
def show(ctx, kind: str, name: str, root: Optional[str], as_json: bool, no_body: bool):
    """Show a single document."""
    registry = _load_registry(ctx, root)
    doc = registry.lookup(kind, name)

    if not doc:
        console.print(f"[red]✗[/red] {doc.kind.value.capitalize()} '{name}' not found")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(doc.to_dict(include_body=not no_body), indent=2, default=str))
        return

    console.print(Panel(
        f"[bold]{doc.name}[/bold] ({doc.kind.value})\n\n"
        f"{escape(doc.description)}\n\n"
        f"Model: {doc.model_tier.value if doc.model_tier else '-'}\n"
        f"Tools: {', '.join(sorted(doc.tool_capabilities)) or '-'}\n"
        f"Source: {doc.source_path}",
        title=f"📄 {doc.name}",
    ))
    if not no_body:
        # Body is printed raw; rich markup inside prompts must not be rendered
        click.echo(doc.body)


@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int]):
    """Start the read-only HTTP API."""
    config: AppConfig = ctx.obj["config"]
    host = host or config.server.host
    port = port or config.server.port

    console.print(Panel(
        f"[bold]Persona Registry v{__version__}[/bold]\n"
        f"Root: {config.registry.root}\n"
        f"Starting server on [cyan]http://{host}:{port}[/cyan]",
        title="🚀 Starting"
    ))

    import uvicorn
    from .server import create_app

    try:
        app = create_app(config)
    except LoadError as e:
        console.print(f"[red]✗[/red] {type(e).__name__}: {escape(str(e))}")
        sys.exit(1)

    uvicorn.run(app, host=host, port=port, log_level=config.logging.level.lower())


# =============================================================================
# Main
# =============================================================================

def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
