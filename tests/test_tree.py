"""Unit tests for services/tree.py"""

import pytest

from services.tree import (
    block_name_and_classes,
    child_elements,
    parse_fragment,
    read_block_config,
    remove_whitespace_text,
    to_class_name,
    to_meta_name,
)


@pytest.mark.parametrize("text,expected", [
    ("Hero", "hero"),
    ("  Two  Words ", "two-words"),
    ("Hero (Dark)!", "hero-dark"),
    ("", ""),
])
def test_to_class_name(text, expected):
    assert to_class_name(text) == expected


def test_to_meta_name_keeps_colons():
    assert to_meta_name("Og:Type") == "og:type"
    assert to_meta_name("Publish Date") == "publish-date"


def test_block_name_and_classes():
    soup = parse_fragment('<div class="columns wide dark"></div><div></div>')
    first, second = child_elements(soup)

    assert block_name_and_classes(first) == ("columns", ["wide", "dark"])
    assert block_name_and_classes(second) == (None, [])


def test_remove_whitespace_text_only_direct_children():
    soup = parse_fragment("<div>\n  <p> </p>\n  <!-- note -->\n</div>")
    div = soup.find("div")

    remove_whitespace_text(div)

    assert str(div) == "<div><p> </p><!-- note --></div>"


def test_read_block_config_value_forms():
    soup = parse_fragment(
        '<div class="metadata">'
        "<div><div>Title</div><div>My Page</div></div>"
        "<div><div>Tags</div><div><ul><li>a</li><li>b</li></ul></div></div>"
        "<div><div>Keywords</div><div><p>one</p><p>two</p></div></div>"
        '<div><div>Image</div><div><picture><img src="/x.png"></picture></div></div>'
        '<div><div>Link</div><div><a href="/target"></a></div></div>'
        "<div><div>Og:Type</div><div>article</div></div>"
        '<div><div>JSON-LD</div><div>{"a": 1}</div></div>'
        "<div><div>Lonely</div></div>"
        "</div>"
    )

    config = read_block_config(soup.find("div"))

    assert config == {
        "title": "My Page",
        "tags": "a, b",
        "keywords": "one, two",
        "image": "/x.png",
        "link": "/target",
        "og:type": "article",
        "json-ld": '{"a": 1}',
    }
