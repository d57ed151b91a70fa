# app/graph/lg_workflow.py
from __future__ import annotations

import logging
from typing import Optional

from app.graph.lg_state import GraphState, create_prepare_state, create_save_state
from app.graph import nodes
from models.schema_models import ComponentSchema
from models.site_models import AemContext, SiteContext

logger = logging.getLogger(__name__)


def run_prepare_workflow(
    site_ctx: SiteContext,
    aem_ctx: AemContext,
    schema: ComponentSchema,
    body_html: Optional[str] = None,
    head_html: Optional[str] = None,
) -> GraphState:
    """
    保存形式の本文からエディタ用ドキュメントを作る直列ワークフロー。

    scaffold → head → body → metadata → assets → annotate → serialize
    """
    logger.info(
        "[lg_workflow] prepare start org=%s site=%s path=%s body=%s",
        site_ctx.org,
        site_ctx.site,
        site_ctx.pathname,
        "YES" if body_html else "NO",
    )

    state = create_prepare_state(site_ctx, aem_ctx, schema, body_html=body_html, head_html=head_html)

    # 1) ドキュメントの骨組み
    state = nodes.scaffold_node(state)

    # 2) head（サイト head.html + エディタ接続）
    state = nodes.head_node(state)

    # 3) 本文（無ければテンプレート）
    state = nodes.body_node(state)

    # 4) metadata ブロック → meta
    state = nodes.metadata_node(state)

    # 5) 画像 URL の相対化
    state = nodes.assets_node(state)

    # 6) エディタ属性の付与
    state = nodes.annotate_node(state)

    # 7) 文字列化
    state = nodes.serialize_document_node(state)

    logger.info(
        "[lg_workflow] prepare done path=%s current_node=%s",
        site_ctx.pathname,
        state.get("current_node"),
    )
    return state


def run_save_workflow(document_html: str) -> GraphState:
    """
    エディタで編集されたドキュメントを保存形式に戻す直列ワークフロー。

    parse → unwrap → restore_assets → strip → serialize
    """
    logger.info("[lg_workflow] save start length=%s", len(document_html or ""))

    state = create_save_state(document_html)
    state = nodes.parse_submission_node(state)
    state = nodes.unwrap_node(state)
    # ヒント属性を使うので strip より前
    state = nodes.restore_assets_node(state)
    state = nodes.strip_node(state)
    state = nodes.serialize_body_node(state)

    logger.info("[lg_workflow] save done current_node=%s", state.get("current_node"))
    return state
