# agents/library_agent.py

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from app.config import settings
from models.library_models import BlockCatalogEntry, BlockLibraryEntry, BlockVariant
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
from services.crawler import fetch_html, fetch_json
from services.tree import (
    block_name_and_classes,
    child_elements,
    is_heading,
    parse_fragment,
    text_content,
    to_class_name,
    to_html,
)

logger = logging.getLogger(__name__)

LIBRARY_METADATA = "library-metadata"
DEFAULT_GROUP = "blocks"


# ============================================================
# カタログ取得
# ============================================================

def _first_sheet(data: Any) -> Optional[List[Any]]:
    """シート形式の JSON から行データを取り出す（multi-sheet なら先頭シート）。"""
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("data"), list):
        return data["data"]
    for name in data.get(":names") or []:
        sheet = data.get(name)
        if isinstance(sheet, dict) and isinstance(sheet.get("data"), list):
            return sheet["data"]
    return None


def fetch_block_catalog(url: Optional[str] = None, auth_token: Optional[str] = None) -> List[BlockCatalogEntry]:
    """
    ブロックライブラリの一覧（blocks.json）を取得する。
    name / path の無い行は無視し、取得失敗時は空リストを返す。
    """
    url = url or settings.block_library_url
    try:
        data = fetch_json(url, auth_token=auth_token)
    except Exception as e:
        logger.warning("[library_agent] catalog fetch failed url=%s: %s", url, e)
        return []

    entries: List[BlockCatalogEntry] = []
    for row in _first_sheet(data) or []:
        if not isinstance(row, dict) or not row.get("name") or not row.get("path"):
            continue
        entries.append(
            BlockCatalogEntry(
                name=row["name"],
                path=row["path"],
                group=row.get("group") or DEFAULT_GROUP,
                items=row.get("items") or None,
            )
        )

    logger.info("[library_agent] catalog url=%s blocks=%s", url, len(entries))
    return entries


# ============================================================
# バリアント抽出
# ============================================================

def _key_values(block) -> Dict[str, str]:
    """library-metadata の2カラム行を key/value にする。"""
    values: Dict[str, str] = {}
    for row in child_elements(block, "div"):
        cells = child_elements(row)
        if len(cells) < 2:
            continue
        key = to_class_name(text_content(cells[0]))
        if key:
            values[key] = text_content(cells[1]).strip()
    return values


def extract_variants(html: str) -> List[BlockVariant]:
    """
    サンプルページから main > section > (div | 見出し) を文書順に拾い、
    div をバリアントとして返す。

    - 直前が空でない見出しなら、その文字列を表示名にする
    - 直後が library-metadata ならその内容を metadata として持たせる
    - main が無い断片（.plain.html）はルート直下をセクションとみなす
    """
    fragment = parse_fragment(html)
    main = fragment.find("main") or fragment

    nodes = []
    for section in child_elements(main, "div"):
        nodes.extend(c for c in child_elements(section) if c.name == "div" or is_heading(c))

    variants: List[BlockVariant] = []
    for index, node in enumerate(nodes):
        if node.name != "div":
            continue
        block_name, classes = block_name_and_classes(node)
        if not block_name:
            logger.debug("[library_agent] skip classless div in sample")
            continue
        if block_name == LIBRARY_METADATA:
            continue

        display_name = block_name
        previous = nodes[index - 1] if index > 0 else None
        if previous is not None and is_heading(previous) and text_content(previous).strip():
            display_name = text_content(previous).strip()

        metadata: Dict[str, str] = {}
        following = nodes[index + 1] if index + 1 < len(nodes) else None
        if following is not None and following.name == "div":
            if block_name_and_classes(following)[0] == LIBRARY_METADATA:
                metadata = _key_values(following)

        # library-metadata の name は表示名を上書きする
        display_name = metadata.get("name") or display_name

        variants.append(
            BlockVariant(
                id=to_class_name(display_name),
                name=display_name,
                model=block_name,
                classes=classes,
                html=to_html(node),
                metadata=metadata,
            )
        )
    return variants


def _is_aem_hosted(url: str) -> bool:
    host = urlparse(url).netloc
    return any(host.endswith(origin) for origin in settings.aem_origins)


def fetch_block_variants(path: str, auth_token: Optional[str] = None) -> List[BlockVariant]:
    """1ブロック分のサンプルページを取得してバリアントを抽出する。"""
    postfix = ".plain.html" if _is_aem_hosted(path) else ""
    html = fetch_html(f"{path}{postfix}", auth_token=auth_token)
    if not html:
        return []
    return extract_variants(html)


def fetch_block_library(
    catalog_url: Optional[str] = None,
    auth_token: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> List[BlockLibraryEntry]:
    """
    カタログの各ブロックについてサンプルを並列取得する。

    - 失敗したブロック・バリアント0件のブロックは捨てる（他には影響させない）
    - 結果はカタログ順
    """
    catalog = fetch_block_catalog(catalog_url, auth_token=auth_token)
    if not catalog:
        return []

    workers = max(1, min(max_workers or settings.library_max_workers, len(catalog)))
    results: Dict[int, BlockLibraryEntry] = {}

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(fetch_block_variants, entry.path, auth_token): (index, entry)
            for index, entry in enumerate(catalog)
        }
        for future in as_completed(futures):
            index, entry = futures[future]
            try:
                variants = future.result()
            except Exception as e:
                logger.warning("[library_agent] block fetch failed name=%s path=%s: %s", entry.name, entry.path, e)
                continue

            if not variants:
                logger.info("[library_agent] no variants found name=%s", entry.name)
                continue

            results[index] = BlockLibraryEntry(
                name=entry.name,
                path=entry.path,
                group=entry.group,
                items=entry.items,
                variants=variants,
            )

    logger.info("[library_agent] library blocks=%s (catalog=%s)", len(results), len(catalog))
    return [results[i] for i in sorted(results)]


# ============================================================
# スキーマ生成
# ============================================================

def unique_variants(variants: List[BlockVariant]) -> List[BlockVariant]:
    """(id, name) で重複を除く。発見順は保つ。"""
    seen = set()
    unique: List[BlockVariant] = []
    for variant in variants:
        if variant.key in seen:
            continue
        seen.add(variant.key)
        unique.append(variant)
    return unique


def _is_metadata_block(block: BlockLibraryEntry) -> bool:
    return "metadata" in block.name.lower()


def block_component_ids(block: BlockLibraryEntry) -> List[str]:
    """ブロックから生成される定義 id（ベース + バリアント）。"""
    block_id = to_class_name(block.name)
    unique = unique_variants(block.variants)
    if len(unique) <= 1:
        return [block_id]
    return [block_id] + [f"{block_id}-{n}" for n in range(1, len(unique) + 1)]


def _item_sample(variant: BlockVariant) -> Optional[str]:
    """バリアントの最初の行（ブロック直下の div）をアイテムのサンプルにする。"""
    if not variant.html:
        return None
    root = next(iter(child_elements(parse_fragment(variant.html), "div")), None)
    if root is None:
        return None
    row = next(iter(child_elements(root, "div")), None)
    return to_html(row) if row is not None else None


def _component_entry(title: str, component_id: str, model: str, html: Optional[str]) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"title": title, "id": component_id, "model": model}
    if html:
        entry["plugins"] = {"da": {"unsafeHTML": html}}
    return entry


def _block_definition_entries(block: BlockLibraryEntry) -> List[Dict[str, Any]]:
    block_id = to_class_name(block.name)
    unique = unique_variants(block.variants)
    ids = block_component_ids(block)

    entries: List[Dict[str, Any]] = []
    if len(unique) == 1:
        entries.append(_component_entry(unique[0].name, block_id, block_id, unique[0].html))
    else:
        # ベース定義（サンプル無し）+ バリアントごとの定義
        entries.append(_component_entry(block.name, block_id, block_id, None))
        for component_id, variant in zip(ids[1:], unique):
            entries.append(_component_entry(variant.name, component_id, block_id, variant.html))

    if block.items and unique:
        item: Dict[str, Any] = {"title": block.items, "id": f"{block_id}-item"}
        sample = _item_sample(unique[0])
        if sample:
            item["plugins"] = {"da": {"unsafeHTML": sample}}
        entries.insert(1, item)
    return entries


def build_component_definitions(blocks: List[BlockLibraryEntry]) -> ComponentDefinitionDocument:
    document = DEFAULT_COMPONENT_DEFINITIONS.model_dump(mode="json", by_alias=True, exclude_none=True)
    groups: List[Dict[str, Any]] = document["groups"]
    blocks_group = next(g for g in groups if g["id"] == DEFAULT_GROUP)

    for block in blocks:
        if _is_metadata_block(block):
            continue

        group = blocks_group
        if block.group != DEFAULT_GROUP:
            group_id = to_class_name(block.group)
            group = next((g for g in groups if g["id"] == group_id), None)
            if group is None:
                group = {"title": block.group, "id": group_id, "components": []}
                groups.append(group)

        group["components"].extend(_block_definition_entries(block))

    return ComponentDefinitionDocument.model_validate(document)


def build_component_models(blocks: List[BlockLibraryEntry]) -> Tuple[ComponentModel, ...]:
    """修飾クラスを持つバリアントがあるブロックに classes (multiselect) を追加する。"""
    models = list(DEFAULT_COMPONENT_MODELS)

    for block in blocks:
        classes: List[str] = []
        for variant in block.variants:
            for cls in variant.classes:
                if cls not in classes:
                    classes.append(cls)
        if not classes:
            continue

        models.append(
            ComponentModel.model_validate(
                {
                    "id": to_class_name(block.name),
                    "fields": [
                        {
                            "component": "multiselect",
                            "name": "classes",
                            "label": "Styles",
                            "options": [{"name": cls, "value": cls} for cls in classes],
                        }
                    ],
                }
            )
        )
    return tuple(models)


def build_component_filters(blocks: List[BlockLibraryEntry]) -> Tuple[ComponentFilter, ...]:
    """section フィルタに生成した定義 id を足す。items を持つブロックには専用フィルタを作る。"""
    section_ids: List[str] = []
    block_filters: List[ComponentFilter] = []

    for block in blocks:
        if _is_metadata_block(block):
            continue
        for component_id in block_component_ids(block):
            if component_id not in section_ids:
                section_ids.append(component_id)
        if block.items:
            block_id = to_class_name(block.name)
            block_filters.append(ComponentFilter(id=block_id, components=(f"{block_id}-item",)))

    filters: List[ComponentFilter] = []
    for f in DEFAULT_COMPONENT_FILTERS:
        if f.id == "section":
            extra = tuple(i for i in section_ids if i not in f.components)
            f = ComponentFilter(id=f.id, components=f.components + extra)
        filters.append(f)
    return tuple(filters + block_filters)


def derive_component_schema(blocks: List[BlockLibraryEntry]) -> ComponentSchema:
    schema = ComponentSchema(
        definitions=build_component_definitions(blocks),
        models=build_component_models(blocks),
        filters=build_component_filters(blocks),
    )
    logger.info(
        "[library_agent] derived schema blocks=%s models=%s filters=%s",
        len(blocks),
        len(schema.models),
        len(schema.filters),
    )
    return schema


def build_schema_from_library(
    catalog_url: Optional[str] = None,
    auth_token: Optional[str] = None,
) -> ComponentSchema:
    """カタログ取得 → サンプル取得 → スキーマ生成までをまとめて行う。"""
    return derive_component_schema(fetch_block_library(catalog_url, auth_token=auth_token))
