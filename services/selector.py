# services/selector.py

"""
コンポーネント定義のフィールドセレクタ用の小さなマッチャ。

対応する書式:
  tag / *            要素名
  .cls  #id          クラス・ID
  [attr] [attr=v]    属性の有無・値
  :nth-child(n)      兄弟要素内の位置（1 始まり）
  "a b" / "a > b"    子孫・子の結合子

汎用 CSS セレクタ実装ではなく、ここに書いた範囲だけを扱う。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag


class SelectorSyntaxError(ValueError):
    pass


_TAG_RE = re.compile(r"\*|[a-zA-Z][\w-]*")
_PART_RE = re.compile(
    r"\.(?P<cls>[\w-]+)"
    r"|#(?P<id>[\w-]+)"
    r"|\[(?P<attr>[\w:-]+)(?:=(?P<quote>[\"']?)(?P<value>[^\]\"']*)(?P=quote))?\]"
    r"|:nth-child\((?P<nth>\d+)\)"
)


@dataclass(frozen=True)
class Compound:
    tag: Optional[str] = None
    classes: Tuple[str, ...] = ()
    id: Optional[str] = None
    attrs: Tuple[Tuple[str, Optional[str]], ...] = ()
    nth: Optional[int] = None

    def matches(self, el: Tag) -> bool:
        if self.tag and self.tag != "*" and el.name != self.tag:
            return False
        if self.classes:
            el_classes = el.get_attribute_list("class")
            if any(c not in el_classes for c in self.classes):
                return False
        if self.id is not None and el.get("id") != self.id:
            return False
        for name, value in self.attrs:
            if not el.has_attr(name):
                return False
            if value is not None and _attr_text(el, name) != value:
                return False
        if self.nth is not None and _element_position(el) != self.nth:
            return False
        return True


@dataclass(frozen=True)
class Step:
    compound: Compound
    # 左隣のステップとの結合子（先頭は None）
    combinator: Optional[str] = None


@dataclass(frozen=True)
class Selector:
    source: str
    steps: Tuple[Step, ...] = field(default_factory=tuple)


def _attr_text(el: Tag, name: str) -> str:
    value = el.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return "" if value is None else str(value)


def _element_position(el: Tag) -> int:
    return 1 + sum(1 for s in el.previous_siblings if isinstance(s, Tag))


def _parse_compound(text: str, source: str) -> Compound:
    pos = 0
    tag = None
    m = _TAG_RE.match(text)
    if m:
        tag = m.group(0).lower()
        pos = m.end()

    classes: List[str] = []
    attrs: List[Tuple[str, Optional[str]]] = []
    el_id = None
    nth = None
    while pos < len(text):
        m = _PART_RE.match(text, pos)
        if not m:
            raise SelectorSyntaxError(f"unsupported selector: {source!r}")
        if m.group("cls"):
            classes.append(m.group("cls"))
        elif m.group("id"):
            el_id = m.group("id")
        elif m.group("attr"):
            attrs.append((m.group("attr"), m.group("value") if "=" in m.group(0) else None))
        else:
            nth = int(m.group("nth"))
        pos = m.end()

    if tag is None and not (classes or attrs or el_id or nth):
        raise SelectorSyntaxError(f"empty compound in selector: {source!r}")
    return Compound(tag=tag, classes=tuple(classes), id=el_id, attrs=tuple(attrs), nth=nth)


@lru_cache(maxsize=256)
def parse_selector(source: str) -> Selector:
    tokens = re.sub(r"\s*>\s*", " > ", (source or "").strip()).split()
    if not tokens:
        raise SelectorSyntaxError("empty selector")

    steps: List[Step] = []
    pending: Optional[str] = None
    for token in tokens:
        if token == ">":
            if not steps or pending:
                raise SelectorSyntaxError(f"dangling combinator: {source!r}")
            pending = ">"
            continue
        combinator = None
        if steps:
            combinator = pending or " "
        steps.append(Step(compound=_parse_compound(token, source), combinator=combinator))
        pending = None

    if pending:
        raise SelectorSyntaxError(f"dangling combinator: {source!r}")
    return Selector(source=source, steps=tuple(steps))


def _ancestors_within(el: Tag, scope: Tag) -> List[Tag]:
    """el の祖先を近い順に返す。scope より外側はたどらない。"""
    result: List[Tag] = []
    parent = el.parent
    while isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
        result.append(parent)
        if parent is scope:
            break
        parent = parent.parent
    return result


def _match_at(el: Tag, steps: Tuple[Step, ...], index: int, scope: Tag) -> bool:
    step = steps[index]
    if not step.compound.matches(el):
        return False
    if index == 0:
        return True

    ancestors = _ancestors_within(el, scope)
    if step.combinator == ">":
        return bool(ancestors) and _match_at(ancestors[0], steps, index - 1, scope)
    return any(_match_at(a, steps, index - 1, scope) for a in ancestors)


def matches(el: Tag, selector: str, scope: Optional[Tag] = None) -> bool:
    parsed = parse_selector(selector)
    return _match_at(el, parsed.steps, len(parsed.steps) - 1, scope if scope is not None else el)


def select_all(selector: str, scope: Tag) -> List[Tag]:
    """scope の子孫から一致する要素を文書順で返す（scope 自身は含まない）。"""
    parsed = parse_selector(selector)
    last = len(parsed.steps) - 1
    return [
        el for el in scope.descendants
        if isinstance(el, Tag) and _match_at(el, parsed.steps, last, scope)
    ]


def select_one(selector: str, scope: Tag) -> Optional[Tag]:
    parsed = parse_selector(selector)
    last = len(parsed.steps) - 1
    for el in scope.descendants:
        if isinstance(el, Tag) and _match_at(el, parsed.steps, last, scope):
            return el
    return None
