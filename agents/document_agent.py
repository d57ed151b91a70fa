# agents/document_agent.py

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from models.schema_defaults import DEFAULT_HTML_TEMPLATE
from models.site_models import AemContext, SiteContext
from services.tree import (
    block_name_and_classes,
    child_elements,
    new_element,
    parse_fragment,
    read_block_config,
)

logger = logging.getLogger(__name__)

HTML_SKELETON = "<!DOCTYPE html><html><head></head><body></body></html>"

UE_CORS_SCRIPT = "https://universal-editor-service.adobe.io/cors.js"


class DocumentAssemblyError(Exception):
    """ルートドキュメントを組み立てられない場合のエラー（クライアントに返す）。"""


def build_skeleton() -> BeautifulSoup:
    return BeautifulSoup(HTML_SKELETON, "html.parser")


def _parse(html: str) -> BeautifulSoup:
    try:
        return parse_fragment(html)
    except Exception as e:
        raise DocumentAssemblyError(f"unparseable document: {e}") from e


def parse_body_children(body_html: Optional[str]) -> List:
    """
    保存済み本文（<body>...</body> または断片）から body の子ノードを取り出す。
    空ならデフォルトテンプレートを使う。
    """
    source = body_html if body_html and body_html.strip() else DEFAULT_HTML_TEMPLATE
    fragment = _parse(source)
    body = fragment.find("body")
    container = body if body is not None else fragment
    return [child.extract() for child in list(container.contents)]


def site_head_entries(site_ctx: SiteContext, head_html: str) -> List:
    """
    サイトの head.html を要素列にする。
    ローカル開発時は script[src] / link[href] を /{org}/{site} 配下に寄せる。
    """
    fragment = _parse(head_html or "")
    if site_ctx.is_local:
        base = f"/{site_ctx.org}/{site_ctx.site}"
        for el in fragment.find_all(["script", "link"]):
            attr = "src" if el.name == "script" else "href"
            url = el.get(attr)
            if url and not url.startswith("http") and not url.startswith(base):
                el[attr] = f"{base}{url}"
    return [child.extract() for child in list(fragment.contents)]


def ue_head_entries(site_ctx: SiteContext, aem_ctx: AemContext) -> List[Tag]:
    """エディタ接続用の meta / script を生成する。"""
    base = f"/{site_ctx.org}/{site_ctx.site}"
    entries: List[Tag] = [
        new_element(
            "meta",
            {
                "name": "urn:adobe:aue:system:ab",
                "content": f"{aem_ctx.ue_url or ''}/{site_ctx.org}{site_ctx.pathname}",
            },
        )
    ]
    if aem_ctx.ue_service:
        entries.append(
            new_element("meta", {"name": "urn:adobe:aue:config:service", "content": aem_ctx.ue_service})
        )
    entries.append(new_element("script", {"src": UE_CORS_SCRIPT, "async": ""}))
    entries.append(
        new_element("script", {"type": "application/vnd.adobe.aue.component+json", "src": f"{base}/component-definition.json"})
    )
    entries.append(
        new_element("script", {"type": "application/vnd.adobe.aue.model+json", "src": f"{base}/component-models.json"})
    )
    entries.append(
        new_element("script", {"type": "application/vnd.adobe.aue.filter+json", "src": f"{base}/component-filters.json"})
    )
    return entries


def find_metadata_block(body: Tag) -> Optional[Tag]:
    for el in body.find_all("div"):
        name, _ = block_name_and_classes(el)
        if name == "metadata":
            return el
    return None


def extract_page_metadata(body: Tag) -> Dict[str, str]:
    """本文の metadata ブロックを読み取り、head の meta 用 dict にする。"""
    block = find_metadata_block(body)
    if block is None:
        return {}
    return {k: v for k, v in read_block_config(block).items() if v}


def metadata_entries(metadata: Dict[str, str]) -> List[Tag]:
    return [new_element("meta", {"name": name, "content": value}) for name, value in metadata.items()]


def locate_body(document: BeautifulSoup) -> Tag:
    """
    エディタから送られたドキュメントの body を返す。
    body が無ければ断片全体を body とみなす。要素が1つも無ければエラー。
    """
    body = document.find("body")
    if body is not None:
        return body
    if not child_elements(document):
        raise DocumentAssemblyError("document has no elements")
    return document


def parse_submission(html: str) -> BeautifulSoup:
    if not isinstance(html, str):
        raise DocumentAssemblyError("document must be a string")
    return _parse(html)
