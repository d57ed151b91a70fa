# services/tree.py

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag

Node = Union[Tag, NavigableString]

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# new_element 用の空ドキュメント（要素生成だけに使う）
_FACTORY = BeautifulSoup("", "html.parser")


def parse_fragment(html: str) -> BeautifulSoup:
    """HTML 断片をツリーに変換する。html/body は補完しない。"""
    return BeautifulSoup(html or "", "html.parser")


def to_html(node: Node) -> str:
    return str(node)


def new_element(name: str, attrs: Optional[Dict[str, object]] = None) -> Tag:
    return _FACTORY.new_tag(name, attrs=dict(attrs or {}))


def is_element(node: object, *names: str) -> bool:
    if not isinstance(node, Tag):
        return False
    return not names or node.name in names


def is_heading(node: object) -> bool:
    return is_element(node, *HEADING_TAGS)


def is_whitespace_text(node: object) -> bool:
    # Comment / Doctype などの派生クラスは対象外
    return type(node) is NavigableString and not node.strip()


def child_elements(tag: Tag, *names: str) -> List[Tag]:
    """直下の要素ノードだけを返す（:scope > name 相当）。"""
    return [c for c in tag.children if is_element(c, *names)]


def remove_whitespace_text(tag: Tag) -> Tag:
    """直下の空白だけのテキストノードを取り除く。"""
    for child in list(tag.children):
        if is_whitespace_text(child):
            child.extract()
    return tag


def text_content(node: Node) -> str:
    if isinstance(node, Tag):
        return node.get_text()
    return str(node)


def block_name_and_classes(tag: Tag) -> Tuple[Optional[str], List[str]]:
    """
    class の先頭トークンをブロック名、残りをバリアントクラスとして返す。
    class が無ければ (None, [])。
    """
    classes = [c for c in tag.get_attribute_list("class") if c]
    if not classes:
        return None, []
    return classes[0], classes[1:]


def to_class_name(text: str) -> str:
    """任意の文字列を class / id として使える slug にする。"""
    if not text:
        return ""
    slug = re.sub(r"[^0-9a-z]", "-", text.strip().lower())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def to_meta_name(text: str) -> str:
    """英数字・コロン・アンダースコア以外を - に置き換える。"""
    return re.sub(r"[^0-9a-z:_]", "-", (text or "").lower())


def _read_config_value(value_cell: Tag) -> Optional[str]:
    first = next(iter(child_elements(value_cell)), None)
    if first is not None:
        items: Optional[List[Tag]] = None
        if first.name == "p":
            # 複数段落
            items = child_elements(value_cell)
        elif first.name in ("ul", "ol"):
            items = child_elements(first)
        if items:
            joined = ", ".join(text_content(i) for i in items)
            if joined:
                return joined

    value = text_content(value_cell).strip().replace("   ", ",")
    if value:
        return value

    link = value_cell.find("a")
    if link is not None and link.get("href"):
        return link.get("href")

    img = value_cell.find("img")
    if img is not None and img.get("src"):
        return img.get("src")
    return value or None


def read_block_config(block: Tag) -> Dict[str, Optional[str]]:
    """
    2カラム構成のブロック（metadata など）を key/value の dict にする。
    1列目がキー、2列目が値。値は段落・リスト・リンク・画像の順で解釈する。
    """
    config: Dict[str, Optional[str]] = {}
    for row in child_elements(block, "div"):
        cells = child_elements(row, "div")
        if len(cells) < 2:
            continue
        name = to_meta_name(text_content(cells[0]).strip())
        if not name:
            continue
        if name == "json-ld":
            # json-ld は整形しない
            config[name] = text_content(cells[1]).strip()
            continue
        config[name] = _read_config_value(cells[1])
    return config
