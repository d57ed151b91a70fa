# services/deannotator.py

from __future__ import annotations

import logging
from typing import List

from bs4 import Tag

from services.annotator import AUE_PREFIX
from services.tree import Node, is_element

logger = logging.getLogger(__name__)


def is_synthetic_wrapper(node: object) -> bool:
    """annotator が生成した richtext ラッパーか（resource を持つものだけ）。"""
    return (
        is_element(node, "div")
        and node.get(f"{AUE_PREFIX}type") == "richtext"
        and bool(node.get(f"{AUE_PREFIX}resource"))
    )


def _unwrapped(node: Node) -> List[Node]:
    """node を処理した結果、親の子リストに入るノード列を返す。"""
    if not isinstance(node, Tag):
        return [node]

    children: List[Node] = []
    for child in [c.extract() for c in list(node.contents)]:
        children.extend(_unwrapped(child))

    if is_synthetic_wrapper(node):
        return children

    for child in children:
        node.append(child)
    return [node]


def unwrap_paragraphs(tree: Tag) -> Tag:
    """
    richtext ラッパーを取り除き、中身を元の位置に戻す。
    子リストは作り直して差し替える（走査中に splice しない）。
    ブロック・行・セル・アイテムはそのまま残る。
    """
    children: List[Node] = []
    for child in [c.extract() for c in list(tree.contents)]:
        children.extend(_unwrapped(child))
    for child in children:
        tree.append(child)
    return tree


def remove_attributes(tree: Tag) -> Tag:
    """data-aue-* 属性をすべて削除する。それ以外の属性には触れない。"""
    removed = 0
    for el in [tree, *tree.find_all(True)]:
        for name in [n for n in el.attrs if n.startswith(AUE_PREFIX)]:
            del el[name]
            removed += 1
    logger.debug("[deannotator] removed attributes=%s", removed)
    return tree


def restore_storage_form(tree: Tag) -> Tag:
    """保存前の逆変換: ラッパー解除 → 属性削除。"""
    return remove_attributes(unwrap_paragraphs(tree))
