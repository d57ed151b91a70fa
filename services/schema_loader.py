# services/schema_loader.py

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from models.schema_defaults import (
    DEFAULT_COMPONENT_DEFINITIONS,
    DEFAULT_COMPONENT_FILTERS,
    DEFAULT_COMPONENT_MODELS,
)
from models.schema_models import (
    ComponentDefinitionDocument,
    ComponentFilter,
    ComponentModel,
    ComponentSchema,
)
from services.crawler import fetch_json

logger = logging.getLogger(__name__)

SCHEMA_DOCUMENTS = (
    "component-definition.json",
    "component-models.json",
    "component-filters.json",
)


def _fetch_document(url: str, timeout: Optional[float]) -> Optional[Any]:
    try:
        return fetch_json(url, timeout=timeout)
    except Exception as e:
        logger.warning("[schema_loader] fetch failed url=%s: %s", url, e)
        return None


def load_component_schema(live_url: str, timeout: Optional[float] = None) -> ComponentSchema:
    """
    サイトが公開している3つのスキーマ JSON を取得して ComponentSchema にする。

    - ドキュメントごとに独立して扱い、取得・検証に失敗したものだけ既定値に戻す
    - ここでは例外を外に出さない
    """
    host = live_url.rstrip("/")
    definition_doc, models_doc, filters_doc = (
        _fetch_document(f"{host}/{name}", timeout) for name in SCHEMA_DOCUMENTS
    )

    definitions = DEFAULT_COMPONENT_DEFINITIONS
    if definition_doc is not None:
        try:
            definitions = ComponentDefinitionDocument.model_validate(definition_doc)
        except ValidationError as e:
            logger.warning("[schema_loader] invalid component-definition: %s", e)

    models = DEFAULT_COMPONENT_MODELS
    if models_doc is not None:
        try:
            models = tuple(ComponentModel.model_validate(m) for m in models_doc)
        except (ValidationError, TypeError) as e:
            logger.warning("[schema_loader] invalid component-models: %s", e)

    filters = DEFAULT_COMPONENT_FILTERS
    if filters_doc is not None:
        try:
            filters = tuple(ComponentFilter.model_validate(f) for f in filters_doc)
        except (ValidationError, TypeError) as e:
            logger.warning("[schema_loader] invalid component-filters: %s", e)

    logger.info(
        "[schema_loader] loaded schema host=%s groups=%s models=%s filters=%s",
        host,
        len(definitions.groups),
        len(models),
        len(filters),
    )
    return ComponentSchema(definitions=definitions, models=models, filters=filters)
