# services/editable_details.py

from __future__ import annotations

from typing import Dict, List, Optional, Union

from bs4 import Tag

from services.annotator import AUE_PREFIX
from services.tree import block_name_and_classes, child_elements

FieldValues = Dict[str, Union[str, bool]]


def find_editable(tree: Tag, resource: str, prop: Optional[str] = None) -> Optional[Tag]:
    """
    resource（と prop）で編集対象の要素を探す。
    prop は resource を持つ要素自身、またはその子孫に付いていればよい。
    """
    candidates = tree.find_all(attrs={f"{AUE_PREFIX}resource": resource})
    if not prop:
        return candidates[0] if candidates else None

    for el in candidates:
        if el.get(f"{AUE_PREFIX}prop") == prop:
            return el
    for el in candidates:
        inner = el.find(attrs={f"{AUE_PREFIX}prop": prop})
        if inner is not None:
            return inner
    return None


def inner_html(el: Tag) -> str:
    parts = [str(child).strip() for child in el.contents]
    return "\n".join(p for p in parts if p)


def collect_field_values(el: Tag, values: Optional[FieldValues] = None, path: Optional[List[str]] = None) -> FieldValues:
    """
    要素の内側 HTML を root に、子孫要素ごとの内側 HTML を
    "div:nth-child(1)>p:nth-child(2)" 形式のキーで集める。
    """
    values = {} if values is None else values
    path = path or []
    values[">".join(path) if path else "root"] = inner_html(el)

    for index, child in enumerate(child_elements(el), start=1):
        collect_field_values(child, values, [*path, f"{child.name}:nth-child({index})"])
    return values


def add_class_fields(el: Tag, values: FieldValues) -> FieldValues:
    """修飾クラスがあれば classes と classes_{cls} を追加する。"""
    _, classes = block_name_and_classes(el)
    if classes:
        values["classes"] = " ".join(classes)
        for cls in classes:
            values[f"classes_{cls}"] = True
    return values


def editable_details(tree: Tag, resource: str, prop: Optional[str] = None) -> Optional[FieldValues]:
    el = find_editable(tree, resource, prop)
    if el is None:
        return None
    return add_class_fields(el, collect_field_values(el))
