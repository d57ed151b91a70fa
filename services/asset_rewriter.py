# services/asset_rewriter.py

"""
画像 URL の相対化と復元。

エディタに渡すときはコンテンツホストの絶対 URL を相対パスにし、
取り除いたオリジンを要素ごとに data-aue-origin として残す。
保存時はそのヒントを使って絶対 URL に戻す。
ヒントの無い要素は触らない（単一オリジンを仮定しない）。
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from bs4 import Tag

from services.annotator import AUE_PREFIX

logger = logging.getLogger(__name__)

ORIGIN_HINT = f"{AUE_PREFIX}origin"


def _asset_targets(tree: Tag) -> List[Tuple[Tag, str]]:
    """(要素, URL 属性名) の組を文書順で返す。"""
    targets: List[Tuple[Tag, str]] = []
    for el in tree.find_all(["img", "source"]):
        if el.name == "img":
            targets.append((el, "src"))
        elif el.parent is not None and el.parent.name == "picture":
            targets.append((el, "srcset"))
    return targets


def _match_prefix(url: str, prefixes: Iterable[str]) -> Optional[str]:
    for prefix in prefixes:
        if url == prefix or url.startswith(prefix + "/") or url.startswith(prefix + "?"):
            return prefix
    return None


def _relative(url: str, prefix: str) -> str:
    return url[len(prefix):] or "/"


def _is_relative(url: str) -> bool:
    return url.startswith("/") and not url.startswith("//")


def _split_srcset(value: str) -> List[List[str]]:
    return [c.strip().split(None, 1) for c in value.split(",") if c.strip()]


def _join_srcset(candidates: List[List[str]]) -> str:
    return ", ".join(" ".join(c) for c in candidates)


def make_assets_relative(tree: Tag, org: str, site: str, content_hosts: Iterable[str]) -> int:
    """img[src] / picture > source[srcset] のコンテンツホスト URL を相対化する。"""
    prefixes = [f"https://{host}/{org}/{site}" for host in content_hosts]
    rewritten = 0

    for el, attr in _asset_targets(tree):
        value = el.get(attr)
        if not value:
            continue

        if attr == "src":
            prefix = _match_prefix(value, prefixes)
            if prefix is None:
                continue
            el[attr] = _relative(value, prefix)
        else:
            candidates = _split_srcset(value)
            prefix = next(
                (p for p in (_match_prefix(c[0], prefixes) for c in candidates) if p),
                None,
            )
            if prefix is None:
                continue
            for candidate in candidates:
                if _match_prefix(candidate[0], [prefix]):
                    candidate[0] = _relative(candidate[0], prefix)
            el[attr] = _join_srcset(candidates)

        el[ORIGIN_HINT] = prefix
        rewritten += 1

    logger.debug("[asset_rewriter] relativized assets=%s", rewritten)
    return rewritten


def _absolute(url: str, origin: str) -> str:
    if url == "/":
        return origin
    return f"{origin}{url}"


def restore_absolute_assets(tree: Tag) -> int:
    """data-aue-origin を持つ要素の相対 URL を絶対 URL に戻し、ヒントを消す。"""
    restored = 0

    for el, attr in _asset_targets(tree):
        origin = el.get(ORIGIN_HINT)
        if not origin:
            continue

        value = el.get(attr)
        if value:
            if attr == "src":
                if _is_relative(value):
                    el[attr] = _absolute(value, origin)
            else:
                candidates = _split_srcset(value)
                for candidate in candidates:
                    if _is_relative(candidate[0]):
                        candidate[0] = _absolute(candidate[0], origin)
                el[attr] = _join_srcset(candidates)
            restored += 1

        del el[ORIGIN_HINT]

    logger.debug("[asset_rewriter] restored assets=%s", restored)
    return restored
