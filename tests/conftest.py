"""Shared fixtures: build plugin trees on disk."""

import json
from pathlib import Path
from typing import Dict

import pytest


def make_doc(name: str, description: str = "A test document", body: str = "Body text\n", **fields) -> str:
    """Render a document with a YAML header."""
    lines = ["---", f"name: {name}", f"description: {description}"]
    for key, value in fields.items():
        lines.append(f"{key.replace('_', '-')}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def write_tree(tmp_path):
    """Write {relative_path: content} under a fresh plugin root."""

    def _write(files: Dict[str, str], root: Path = None) -> Path:
        root = root or tmp_path / "plugin"
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content.encode("utf-8"))
        return root

    return _write


@pytest.fixture
def plugin_root(write_tree):
    """A small but complete plugin."""
    return write_tree({
        ".claude-plugin/plugin.json": json.dumps({"name": "laravel-kit", "version": "1.2.0"}),
        "README.md": "# Laravel kit\n",
        "agents/reviewer.md": make_doc(
            "laravel-reviewer",
            "Reviews Laravel code",
            body="You are a senior Laravel reviewer.\n",
            tools="Read, Grep, Glob",
            model="sonnet",
            color="green",
        ),
        "agents/architect.md": make_doc(
            "laravel-architect",
            "Designs application structure",
            body="You design Laravel apps.\n",
            tools="Read",
            model="opus",
        ),
        "commands/make-model.md": make_doc(
            "make-model",
            "Scaffold an Eloquent model",
            body="Create a model named $ARGUMENTS.\n",
            allowed_tools="Write, Bash",
            argument_hint="<ModelName>",
        ),
        "skills/eloquent/SKILL.md": make_doc(
            "eloquent",
            "Eloquent ORM reference",
            body="# Eloquent\n\nRelationships...\n",
        ),
        "skills/eloquent/reference/relations.md": "# Relations\n",
        "rules/psr12.md": make_doc("psr-12", "Follow PSR-12 coding style", body="Use PSR-12.\n"),
    })
