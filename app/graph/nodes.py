# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List

from agents import document_agent
from app.config import settings
from app.graph.lg_state import GraphState
from services.annotator import inject_attributes
from services.asset_rewriter import make_assets_relative, restore_absolute_assets
from services.deannotator import remove_attributes, unwrap_paragraphs

logger = logging.getLogger(__name__)


def _log_progress(state: GraphState, node: str, message: str) -> GraphState:
    """
    進捗ログを state に積むユーティリティ。
    state は dict (GraphState) として扱う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- 生成側（保存形式 → エディタ形式） ----------


def scaffold_node(state: GraphState) -> GraphState:
    """空の HTML ドキュメント（head / body）を用意する。"""
    document = document_agent.build_skeleton()
    state["document"] = document
    state["head"] = document.find("head")
    state["body"] = document.find("body")
    return _log_progress(state, "scaffold", "done: document skeleton")


def head_node(state: GraphState) -> GraphState:
    """サイトの head.html とエディタ接続用のエントリを head に入れる。"""
    head = state["head"]
    site_ctx = state["site_ctx"]

    site_entries = document_agent.site_head_entries(site_ctx, state.get("head_html", ""))
    for entry in site_entries:
        head.append(entry)

    ue_entries = document_agent.ue_head_entries(site_ctx, state["aem_ctx"])
    for entry in ue_entries:
        head.append(entry)

    return _log_progress(
        state,
        "head",
        f"done: site_entries={len(site_entries)} ue_entries={len(ue_entries)}",
    )


def body_node(state: GraphState) -> GraphState:
    """保存済み本文（無ければテンプレート）を body に入れる。"""
    body = state["body"]
    children = document_agent.parse_body_children(state.get("body_html"))
    for child in children:
        body.append(child)
    return _log_progress(state, "body", f"done: body_children={len(children)}")


def metadata_node(state: GraphState) -> GraphState:
    """metadata ブロックの内容を head の meta に写す。"""
    metadata = document_agent.extract_page_metadata(state["body"])
    for entry in document_agent.metadata_entries(metadata):
        state["head"].append(entry)
    state["metadata"] = metadata
    return _log_progress(state, "metadata", f"done: meta_entries={len(metadata)}")


def assets_node(state: GraphState) -> GraphState:
    """コンテンツホストの画像 URL を相対化する。"""
    site_ctx = state["site_ctx"]
    count = make_assets_relative(state["body"], site_ctx.org, site_ctx.site, settings.content_hosts)
    return _log_progress(state, "assets", f"done: relativized={count}")


def annotate_node(state: GraphState) -> GraphState:
    """body に data-aue-* 属性を付与する。"""
    inject_attributes(state["body"], state["schema"], resource_prefix=settings.resource_prefix)
    return _log_progress(state, "annotate", "done: attributes injected")


def serialize_document_node(state: GraphState) -> GraphState:
    state["html"] = str(state["document"])
    return _log_progress(state, "serialize", f"done: length={len(state['html'])}")


# ---------- 保存側（エディタ形式 → 保存形式） ----------


def parse_submission_node(state: GraphState) -> GraphState:
    document = document_agent.parse_submission(state["document_html"])
    state["document"] = document
    state["body"] = document_agent.locate_body(document)
    return _log_progress(state, "parse", "done: submission parsed")


def unwrap_node(state: GraphState) -> GraphState:
    unwrap_paragraphs(state["body"])
    return _log_progress(state, "unwrap", "done: richtext wrappers removed")


def restore_assets_node(state: GraphState) -> GraphState:
    count = restore_absolute_assets(state["body"])
    return _log_progress(state, "restore_assets", f"done: restored={count}")


def strip_node(state: GraphState) -> GraphState:
    remove_attributes(state["body"])
    return _log_progress(state, "strip", "done: editor attributes removed")


def serialize_body_node(state: GraphState) -> GraphState:
    state["html"] = str(state["body"])
    return _log_progress(state, "serialize", f"done: length={len(state['html'])}")
