# app/api/routes.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from agents.document_agent import DocumentAssemblyError, parse_submission
from agents.library_agent import build_schema_from_library
from app.config import settings
from app.graph.lg_workflow import run_prepare_workflow, run_save_workflow
from models.site_models import AemContext, SiteContext
from services.crawler import fetch_html
from services.editable_details import editable_details
from services.schema_loader import load_component_schema

logger = logging.getLogger(__name__)

router = APIRouter()

UE_JSON_FILES = (
    "component-definition.json",
    "component-models.json",
    "component-filters.json",
)


# --------- Request / Response モデル ---------


class PrepareRequest(BaseModel):
    org: str
    site: str
    ref: str = "main"
    pathname: str = "/"
    body_html: Optional[str] = None
    head_html: Optional[str] = None

    # True ならブロックライブラリからスキーマを生成する
    use_library_schema: bool = False


class SaveRequest(BaseModel):
    html: str


class EditableTarget(BaseModel):
    resource: str
    prop: Optional[str] = None


class DetailsRequest(BaseModel):
    html: str
    target: EditableTarget


# --------- エンドポイント ---------


@router.get("/.da-ue/{name}")
def api_schema_document(name: str, authorization: Optional[str] = Header(None)) -> Any:
    """
    ブロックライブラリから生成したスキーマの3ドキュメントを返す。
    それ以外のファイル名は 404。
    """
    if name not in UE_JSON_FILES:
        raise HTTPException(status_code=404, detail="not found")

    logger.info("[api.schema] name=%s library=%s", name, settings.block_library_url)
    schema = build_schema_from_library(auth_token=authorization)

    if name == "component-definition.json":
        return schema.definition_document()
    if name == "component-models.json":
        return schema.models_document()
    return schema.filters_document()


@router.post("/api/prepare", response_class=HTMLResponse)
def api_prepare(payload: PrepareRequest, authorization: Optional[str] = Header(None)) -> HTMLResponse:
    """保存形式の本文をエディタ用の HTML ドキュメントにして返す。"""
    site_ctx = SiteContext(
        org=payload.org,
        site=payload.site,
        ref=payload.ref,
        pathname=payload.pathname,
        is_local=settings.local_dev,
    )
    aem_ctx = AemContext.from_site(site_ctx, ue_url=settings.ue_host, ue_service=settings.ue_service)

    head_html = payload.head_html
    if head_html is None:
        try:
            head_html = fetch_html(f"{aem_ctx.live_url}/head.html")
        except Exception as e:
            logger.warning("[api.prepare] head.html fetch failed live_url=%s: %s", aem_ctx.live_url, e)
            raise HTTPException(status_code=404, detail="Not found: Unable to retrieve AEM branch") from e

    if payload.use_library_schema:
        schema = build_schema_from_library(auth_token=authorization)
    else:
        schema = load_component_schema(aem_ctx.live_url)

    try:
        state = run_prepare_workflow(
            site_ctx,
            aem_ctx,
            schema,
            body_html=payload.body_html,
            head_html=head_html,
        )
    except DocumentAssemblyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return HTMLResponse(content=state["html"])


@router.post("/api/save", response_class=HTMLResponse)
def api_save(payload: SaveRequest) -> HTMLResponse:
    """エディタ形式のドキュメントを保存形式の body HTML に戻す。"""
    try:
        state = run_save_workflow(payload.html)
    except DocumentAssemblyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return HTMLResponse(content=state["html"])


@router.post("/api/details")
def api_details(payload: DetailsRequest) -> Dict[str, Any]:
    """編集対象要素の内側 HTML をパス別にまとめて返す。"""
    try:
        document = parse_submission(payload.html)
    except DocumentAssemblyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    data = editable_details(document, payload.target.resource, payload.target.prop)
    if data is None:
        raise HTTPException(status_code=404, detail="editable not found")
    return {"data": data}
