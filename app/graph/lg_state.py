# app/graph/lg_state.py
from __future__ import annotations

from typing import Any, Dict, Optional

from models.schema_models import ComponentSchema
from models.site_models import AemContext, SiteContext


class GraphState(Dict[str, Any]):
    """
    ワークフローの「状態」コンテナ。
    実体はただの dict だが、型ヒントとして分かりやすくするためのラッパ。
    """
    pass


def _base_state() -> GraphState:
    state: GraphState = GraphState()
    state["progress_messages"] = []  # 各ノードからのログ的メッセージ
    state["current_node"] = None
    return state


def create_prepare_state(
    site_ctx: SiteContext,
    aem_ctx: AemContext,
    schema: ComponentSchema,
    body_html: Optional[str] = None,
    head_html: Optional[str] = None,
) -> GraphState:
    """エディタ向けドキュメント生成の初期 state。"""
    state = _base_state()
    state["site_ctx"] = site_ctx
    state["aem_ctx"] = aem_ctx
    state["schema"] = schema
    state["body_html"] = body_html
    state["head_html"] = head_html or ""
    return state


def create_save_state(document_html: str) -> GraphState:
    """保存用（逆変換）の初期 state。"""
    state = _base_state()
    state["document_html"] = document_html
    return state
