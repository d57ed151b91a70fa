"""Unit tests for agents/library_agent.py"""

import pytest

from agents import library_agent
from agents.library_agent import (
    build_component_definitions,
    build_component_filters,
    build_component_models,
    derive_component_schema,
    extract_variants,
    fetch_block_library,
    unique_variants,
)
from models.library_models import BlockLibraryEntry, BlockVariant


SAMPLE_PAGE = """\
<body><main>
  <div>
    <h2>Hero Dark</h2>
    <div class="hero dark"><div><div>Dark</div></div></div>
    <div class="library-metadata">
      <div><div>Description</div><div>A dark hero</div></div>
    </div>
    <div class="hero"><div><div>Plain</div></div></div>
  </div>
  <div>
    <h3></h3>
    <div class="hero wide"><div><div>Wide</div></div></div>
    <div><p>no class</p></div>
  </div>
</main></body>
"""


def _block(name, variants, group="blocks", items=None):
    return BlockLibraryEntry(name=name, path=f"https://example.com/{name}", group=group, items=items, variants=variants)


def _variant(name, model, classes=(), html=None):
    return BlockVariant(
        id=name.lower().replace(" ", "-"),
        name=name,
        model=model,
        classes=list(classes),
        html=html or f'<div class="{model}"><div><div>{name}</div></div></div>',
    )


def _components(document, group_id="blocks"):
    group = next(g for g in document.groups if g.id == group_id)
    return list(group.components)


def test_extract_variants_names_and_metadata():
    variants = extract_variants(SAMPLE_PAGE)

    assert [v.name for v in variants] == ["Hero Dark", "hero", "hero"]
    assert [v.id for v in variants] == ["hero-dark", "hero", "hero"]
    assert variants[0].classes == ["dark"]
    assert variants[0].metadata == {"description": "A dark hero"}
    assert variants[1].metadata == {}
    assert variants[2].classes == ["wide"]
    assert variants[0].html.startswith('<div class="hero dark">')


def test_extract_variants_without_sections():
    assert extract_variants("<p>just text</p>") == []
    assert extract_variants("") == []


def test_extract_variants_from_plain_fragment():
    """Pages without <main> are read from their top-level divs."""
    variants = extract_variants('<div><div class="quote"><div>q</div></div></div>')

    assert [v.model for v in variants] == ["quote"]


def test_unique_variants_by_id_and_name():
    variants = [_variant("x", "x"), _variant("x", "x"), _variant("X Dark", "x")]

    assert [v.name for v in unique_variants(variants)] == ["x", "X Dark"]


def test_definitions_for_multiple_variants():
    """Three discovered variants with one duplicate give a base entry and two variants."""
    block = _block("x", [_variant("x", "x"), _variant("x", "x"), _variant("X Dark", "x", ["dark"])])

    components = _components(build_component_definitions([block]))

    assert [c.id for c in components] == ["x", "x-1", "x-2"]
    assert components[0].title == "x"
    assert components[0].plugins is None
    assert components[2].title == "X Dark"
    assert components[2].model == "x"
    assert components[2].da.unsafe_html.startswith('<div class="x">')


def test_definition_for_single_variant():
    block = _block("Hero", [_variant("Hero", "hero")])

    components = _components(build_component_definitions([block]))

    assert [c.id for c in components] == ["hero"]
    assert components[0].da.unsafe_html is not None


def test_definitions_keep_defaults_and_skip_metadata():
    blocks = [_block("Metadata", [_variant("metadata", "metadata")]), _block("Quote", [_variant("Quote", "quote")])]

    document = build_component_definitions(blocks)

    assert [g.id for g in document.groups] == ["default", "sections", "blocks"]
    assert [c.id for c in _components(document)] == ["quote"]


def test_definitions_item_entry():
    html = '<div class="cards"><div><div>one</div></div><div><div>two</div></div></div>'
    block = _block("Cards", [_variant("Cards", "cards", html=html)], items="Card")

    components = _components(build_component_definitions([block]))

    assert [c.id for c in components] == ["cards", "cards-item"]
    assert components[1].title == "Card"
    assert components[1].da.unsafe_html == "<div><div>one</div></div>"


def test_definitions_custom_group_is_shared():
    blocks = [
        _block("Tabs", [_variant("Tabs", "tabs")], group="Layout"),
        _block("Accordion", [_variant("Accordion", "accordion")], group="Layout"),
    ]

    document = build_component_definitions(blocks)

    assert [g.id for g in document.groups] == ["default", "sections", "blocks", "layout"]
    assert [c.id for c in _components(document, "layout")] == ["tabs", "accordion"]


def test_models_for_variant_classes():
    block = _block(
        "Hero",
        [_variant("Hero", "hero"), _variant("Hero Dark", "hero", ["dark"]), _variant("Hero Wide", "hero", ["dark", "wide"])],
    )
    plain = _block("Quote", [_variant("Quote", "quote")])

    models = build_component_models([block, plain])
    hero = next(m for m in models if m.id == "hero")

    assert [m.id for m in models].count("quote") == 0
    assert hero.fields[0].component == "multiselect"
    assert hero.fields[0].name == "classes"
    assert [o.value for o in hero.fields[0].options] == ["dark", "wide"]
    assert any(m.id == "page-metadata" for m in models)


def test_filters_extend_section():
    blocks = [
        _block("x", [_variant("x", "x"), _variant("X Dark", "x")]),
        _block("Cards", [_variant("Cards", "cards")], items="Card"),
        _block("Section Metadata", [_variant("section-metadata", "section-metadata")]),
    ]

    filters = {f.id: f for f in build_component_filters(blocks)}

    assert filters["section"].components == ("text", "image", "x", "x-1", "x-2", "cards")
    assert filters["cards"].components == ("cards-item",)
    assert filters["main"].components == ("section",)


def test_derive_component_schema_lookups():
    schema = derive_component_schema([_block("Hero", [_variant("Hero", "hero"), _variant("Hero Dark", "hero", ["dark"])])])

    assert schema.get_definition("hero-2").title == "Hero Dark"
    assert schema.get_model("hero") is not None
    assert "hero-1" in schema.get_filter("section").components


def test_fetch_block_library_isolates_failures(monkeypatch):
    catalog = {
        "data": [
            {"name": "Broken", "path": "https://example.com/broken"},
            {"name": "Empty", "path": "https://example.com/empty"},
            {"name": "Hero", "path": "https://example.com/hero", "group": "Heroes"},
            {"name": "No path"},
        ]
    }

    def fake_html(url, timeout=None, auth_token=None):
        if url.endswith("broken"):
            raise RuntimeError("boom")
        if url.endswith("empty"):
            return "<main><div><p>nothing</p></div></main>"
        return SAMPLE_PAGE

    monkeypatch.setattr(library_agent, "fetch_json", lambda url, timeout=None, auth_token=None: catalog)
    monkeypatch.setattr(library_agent, "fetch_html", fake_html)

    blocks = fetch_block_library("https://example.com/blocks.json", max_workers=3)

    assert [b.name for b in blocks] == ["Hero"]
    assert blocks[0].group == "Heroes"
    assert len(blocks[0].variants) == 3


def test_fetch_block_library_catalog_failure(monkeypatch):
    def fail(url, timeout=None, auth_token=None):
        raise RuntimeError("offline")

    monkeypatch.setattr(library_agent, "fetch_json", fail)

    assert fetch_block_library("https://example.com/blocks.json") == []


def test_multi_sheet_catalog_and_plain_html(monkeypatch):
    catalog = {
        ":names": ["blocks"],
        "blocks": {"data": [{"name": "Quote", "path": "https://main--site--org.aem.page/library/quote"}]},
    }
    requested = []

    def fake_html(url, timeout=None, auth_token=None):
        requested.append(url)
        return '<div><div class="quote"><div>q</div></div></div>'

    monkeypatch.setattr(library_agent, "fetch_json", lambda url, timeout=None, auth_token=None: catalog)
    monkeypatch.setattr(library_agent, "fetch_html", fake_html)

    blocks = fetch_block_library("https://example.com/blocks.json")

    assert requested == ["https://main--site--org.aem.page/library/quote.plain.html"]
    assert [b.name for b in blocks] == ["Quote"]


@pytest.mark.parametrize("name,expected", [
    ("Hero", ["hero"]),
    ("Two Words", ["two-words"]),
])
def test_single_variant_ids(name, expected):
    block = _block(name, [_variant(name, "x")])

    assert library_agent.block_component_ids(block) == expected


def test_auth_token_reaches_every_fetch(monkeypatch):
    seen = []

    def fake_json(url, timeout=None, auth_token=None):
        seen.append(auth_token)
        return {"data": [{"name": "Quote", "path": "https://example.com/quote"}]}

    def fake_html(url, timeout=None, auth_token=None):
        seen.append(auth_token)
        return '<div><div class="quote"><div>q</div></div></div>'

    monkeypatch.setattr(library_agent, "fetch_json", fake_json)
    monkeypatch.setattr(library_agent, "fetch_html", fake_html)

    schema = library_agent.build_schema_from_library("https://example.com/blocks.json", auth_token="Bearer abc")

    assert seen == ["Bearer abc", "Bearer abc"]
    assert schema.get_definition("quote") is not None
