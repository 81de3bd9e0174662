"""Tests for the immutable Registry."""

import pytest
from pydantic import ValidationError

from persona_registry.documents import (
    Document, DocumentKind, DuplicateNameError, NotFound, Registry,
)


def doc(kind: DocumentKind, name: str, body: str = "") -> Document:
    return Document(kind=kind, name=name, description=f"{name} doc", body=body,
                    source_path=f"{kind.directory}/{name}.md")


@pytest.fixture
def registry():
    return Registry([
        doc(DocumentKind.AGENT, "zeta"),
        doc(DocumentKind.AGENT, "alpha"),
        doc(DocumentKind.COMMAND, "deploy"),
        doc(DocumentKind.RULE, "style"),
    ])


def test_lookup_hit(registry):
    found = registry.lookup(DocumentKind.AGENT, "alpha")
    assert isinstance(found, Document)
    assert found.name == "alpha"


def test_lookup_miss_returns_not_found(registry):
    """A miss is an ordinary value, not an exception."""
    result = registry.lookup("agent", "does-not-exist")

    assert isinstance(result, NotFound)
    assert not result
    assert result.kind is DocumentKind.AGENT
    assert result.name == "does-not-exist"
    assert str(result) == "agent 'does-not-exist' not found"


def test_lookup_is_exact(registry):
    assert not registry.lookup("agent", "alph")
    assert not registry.lookup("agent", "ALPHA")
    assert not registry.lookup("command", "alpha")


def test_lookup_unknown_kind_is_an_error(registry):
    with pytest.raises(ValueError, match="Unknown document kind"):
        registry.lookup("persona", "alpha")


def test_kind_accepts_directory_spelling(registry):
    assert registry.lookup("agents", "zeta").name == "zeta"
    assert registry.list("commands") == registry.list(DocumentKind.COMMAND)


def test_list_sorted_by_name(registry):
    assert [d.name for d in registry.list("agent")] == ["alpha", "zeta"]
    assert registry.list("skill") == ()


def test_iteration_order(registry):
    assert [(d.kind.value, d.name) for d in registry] == [
        ("agent", "alpha"),
        ("agent", "zeta"),
        ("command", "deploy"),
        ("rule", "style"),
    ]


def test_duplicate_rejected_on_construction():
    with pytest.raises(DuplicateNameError, match="duplicate agent name 'x'"):
        Registry([doc(DocumentKind.AGENT, "x"), doc(DocumentKind.AGENT, "x")])


def test_contains(registry):
    assert ("agent", "alpha") in registry
    assert (DocumentKind.RULE, "style") in registry
    assert ("agent", "nope") not in registry
    assert ("persona", "alpha") not in registry
    assert "alpha" not in registry


def test_stats(registry):
    assert registry.stats() == {
        "agents": 2, "commands": 1, "skills": 0, "rules": 1, "total": 4,
    }


def test_structural_equality():
    docs = [doc(DocumentKind.AGENT, "a"), doc(DocumentKind.RULE, "b")]
    assert Registry(docs) == Registry(list(reversed(docs)))
    assert Registry(docs) != Registry(docs[:1])


def test_documents_are_immutable(registry):
    found = registry.lookup("agent", "alpha")
    with pytest.raises(ValidationError):
        found.name = "changed"


def test_metadata_is_read_only():
    """Extra header fields cannot be changed through a shared Document."""
    meta = {"argument-hint": "<X>", "tags": ["a"]}
    found = Document(kind=DocumentKind.COMMAND, name="x", description="d", metadata=meta)

    with pytest.raises(TypeError):
        found.metadata["argument-hint"] = "HACKED"
    assert found.metadata["tags"] == ("a",)

    meta["argument-hint"] = "changed later"
    assert found.metadata["argument-hint"] == "<X>"
    assert found.to_dict()["metadata"] == {"argument-hint": "<X>", "tags": ["a"]}
    assert found == Document(kind=DocumentKind.COMMAND, name="x", description="d",
                             metadata={"argument-hint": "<X>", "tags": ["a"]})


def test_default_metadata_is_read_only():
    found = doc(DocumentKind.RULE, "r")
    with pytest.raises(TypeError):
        found.metadata["k"] = "v"


def test_list_cannot_be_mutated(registry):
    agents = registry.list("agent")
    assert isinstance(agents, tuple)
    with pytest.raises(TypeError):
        registry._index[(DocumentKind.AGENT, "new")] = doc(DocumentKind.AGENT, "new")


def test_content_hash_tracks_body():
    a = doc(DocumentKind.SKILL, "s", body="one")
    b = doc(DocumentKind.SKILL, "s", body="two")
    assert a.content_hash() != b.content_hash()
    assert a.content_hash() == doc(DocumentKind.SKILL, "s", body="one").content_hash()


def test_to_dict(registry):
    data = registry.lookup("command", "deploy").to_dict(include_body=False)
    assert data["kind"] == "command"
    assert data["name"] == "deploy"
    assert data["tools"] == []
    assert data["model"] is None
    assert "body" not in data
