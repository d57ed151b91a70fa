"""Unit tests for services/editable_details.py"""

from services.editable_details import editable_details, find_editable
from services.tree import parse_fragment


HTML = (
    '<main data-aue-resource="urn:ab:main">'
    '<div data-aue-resource="urn:ab:section-0">'
    '<div class="hero dark" data-aue-resource="urn:ab:section-0/block-0">'
    "<div><div><p>Hi</p><p>There</p></div></div>"
    "</div>"
    '<div data-aue-resource="urn:ab:section-0/text-1"><h2 data-aue-prop="title">Heading</h2></div>'
    "</div>"
    "</main>"
)


def test_block_details_with_paths_and_classes():
    data = editable_details(parse_fragment(HTML), "urn:ab:section-0/block-0")

    assert data["root"] == "<div><div><p>Hi</p><p>There</p></div></div>"
    assert data["div:nth-child(1)"] == "<div><p>Hi</p><p>There</p></div>"
    assert data["div:nth-child(1)>div:nth-child(1)>p:nth-child(2)"] == "There"
    assert data["classes"] == "dark"
    assert data["classes_dark"] is True


def test_prop_inside_resource():
    tree = parse_fragment(HTML)

    assert find_editable(tree, "urn:ab:section-0/text-1", "title").name == "h2"
    assert editable_details(tree, "urn:ab:section-0/text-1", "title") == {"root": "Heading"}


def test_missing_target():
    tree = parse_fragment(HTML)

    assert editable_details(tree, "urn:ab:section-9") is None
    assert editable_details(tree, "urn:ab:section-0/block-0", "nope") is None
