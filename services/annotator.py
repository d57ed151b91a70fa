# services/annotator.py

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from models.schema_models import ComponentSchema, ModelField
from services.selector import SelectorSyntaxError, select_one
from services.tree import (
    block_name_and_classes,
    child_elements,
    is_element,
    new_element,
    remove_whitespace_text,
    text_content,
)

logger = logging.getLogger(__name__)

# エディタ用属性の名前空間
AUE_PREFIX = "data-aue-"

DEFAULT_RESOURCE_PREFIX = "urn:ab:"

RICHTEXT_CLASS = "richtext"

# 編集対象にしないブロック名
NON_EDITABLE_BLOCKS = ("metadata", "section-metadata", RICHTEXT_CLASS)

# 段落ラップの対象外（そのまま素通しする）要素
PASS_THROUGH_TAGS = ("div", "img", "picture")

# フィールド計装の対象にする種別
INSTRUMENTED_FIELD_KINDS = ("richtext", "reference", "text")


def add_attributes(node: Tag, attributes: Dict[str, str]) -> None:
    """data-aue-* 属性をまとめて付与する。"""
    for name, value in attributes.items():
        node[f"{AUE_PREFIX}{name}"] = value


def wrap_paragraphs(container: Tag) -> List[Tag]:
    """
    div / img / picture 以外の連続する子ノードを richtext 用の div でまとめる。
    子リストは作り直して差し替え、相対順序は保つ。
    生成したラッパーだけを返す（手書きの div.richtext は含まない）。
    """
    remove_whitespace_text(container)
    original_children = [child.extract() for child in list(container.contents)]

    wrappers: List[Tag] = []
    current: Optional[Tag] = None
    for child in original_children:
        if is_element(child, *PASS_THROUGH_TAGS):
            current = None
            container.append(child)
            continue
        if current is None:
            current = new_element("div", {"class": [RICHTEXT_CLASS]})
            wrappers.append(current)
            container.append(current)
        current.append(child)
    return wrappers


def _field_type(field: ModelField) -> str:
    return "media" if field.component == "reference" else field.component


def _is_instrumentable(field: ModelField) -> bool:
    if field.component not in INSTRUMENTED_FIELD_KINDS:
        return False
    # 配列のテキストは要素1つに対応しない
    return not (field.component == "text" and field.multi)


def add_block_field_attributes(block: Tag, component_id: str, schema: ComponentSchema) -> None:
    """
    定義の fields（name → selector）とモデルのフィールドを突き合わせ、
    ブロック内の該当要素に type / prop / label を付ける。
    """
    definition = schema.get_definition(component_id)
    model = schema.get_model(component_id)
    if definition is None or model is None:
        logger.debug("[annotator] no definition/model for component=%s", component_id)
        return

    selectors = (definition.da.fields or ()) if definition.da else ()
    if not selectors or not model.fields:
        return

    seen = set()
    for cmp_field in selectors:
        if not cmp_field.selector:
            continue
        cleaned = re.sub(r"\[.*?\]", "", cmp_field.selector)
        if cleaned in seen:
            continue
        seen.add(cleaned)

        model_field = next((mf for mf in model.fields if mf.name == cmp_field.name), None)
        if model_field is None or not _is_instrumentable(model_field):
            continue

        try:
            target = select_one(cmp_field.selector, block)
        except SelectorSyntaxError as e:
            logger.warning(
                "[annotator] skip field component=%s name=%s: %s",
                component_id,
                cmp_field.name,
                e,
            )
            continue
        if target is None:
            continue

        add_attributes(
            target,
            {
                "type": _field_type(model_field),
                "prop": cmp_field.name,
                "label": model_field.label or cmp_field.name,
            },
        )


def _annotate_columns(
    block: Tag,
    block_name: str,
    base: str,
    schema: ComponentSchema,
) -> None:
    """columns ブロック: block → row → cell のコンテナ階層を付与する。"""
    definition = schema.get_definition(block_name)
    title = definition.title if definition else block_name
    cell_filter = schema.get_filter(f"{block_name}-cell")

    add_attributes(block, {"resource": base, "type": "container"})

    for r_index, row in enumerate(child_elements(block, "div")):
        row_resource = f"{base}/row-{r_index}"
        add_attributes(
            row,
            {
                "resource": row_resource,
                "label": f"{title} Row",
                "component": f"{block_name}-row",
                "model": f"{block_name}-row",
                "type": "container",
                "behavior": "component",
            },
        )

        for c_index, cell in enumerate(child_elements(row, "div")):
            cell_resource = f"{row_resource}/cell-{c_index}"
            add_attributes(
                cell,
                {
                    "resource": cell_resource,
                    "label": f"{title} Cell",
                    "component": f"{block_name}-cell",
                    "model": f"{block_name}-cell",
                    "type": "container",
                    "behavior": "component",
                },
            )

            if cell_filter is None or not cell_filter.components:
                continue

            for i_index, picture in enumerate(child_elements(cell, "picture")):
                add_attributes(
                    picture,
                    {
                        "resource": f"{cell_resource}/image-{i_index}",
                        "label": "Image",
                        "component": "image",
                        "prop": "image",
                        "type": "media",
                    },
                )

            for w_index, wrapper in enumerate(wrap_paragraphs(cell)):
                add_attributes(
                    wrapper,
                    {
                        "resource": f"{cell_resource}/text-{w_index}",
                        "component": "text",
                        "type": "richtext",
                        "label": "Text",
                        "prop": "root",
                        "behavior": "component",
                    },
                )


def _annotate_key_value(block: Tag, block_name: str, schema: ComponentSchema) -> None:
    """
    key-value ブロック: 各行の1列目をフィールド名として扱い、
    一致したモデルフィールドの属性を2列目に付ける。
    """
    model = schema.get_model(block_name)
    if model is None or not model.fields:
        logger.debug("[annotator] key-value block without model: %s", block_name)
        return

    for row in child_elements(block, "div"):
        columns = child_elements(row, "div")
        if len(columns) != 2:
            logger.debug(
                "[annotator] key-value row skipped block=%s columns=%s",
                block_name,
                len(columns),
            )
            continue

        key = text_content(columns[0]).strip()
        if not key:
            continue

        model_field = next((mf for mf in model.fields if mf.name == key), None)
        if model_field is None:
            continue

        add_attributes(
            columns[1],
            {
                "type": _field_type(model_field),
                "prop": model_field.name,
                "label": model_field.label or model_field.name,
            },
        )


def _annotate_items(block: Tag, block_name: str, base: str, schema: ComponentSchema) -> None:
    filter_def = schema.get_filter(block_name)
    if filter_def is None:
        return

    add_attributes(block, {"component": block_name, "type": "container"})

    item_id = filter_def.components[0] if filter_def.components else None
    item_def = schema.get_definition(item_id)
    if item_def is None:
        logger.debug("[annotator] no item definition block=%s item=%s", block_name, item_id)
        return

    for bi_index, item in enumerate(child_elements(block, "div")):
        add_attributes(
            item,
            {
                "resource": f"{base}/item-{bi_index}",
                "type": "component",
                "label": item_def.title,
                "model": item_def.id,
                "component": item_def.id,
            },
        )
        add_block_field_attributes(item, item_def.id, schema)


def _annotate_block(
    block: Tag,
    s_index: int,
    b_index: int,
    schema: ComponentSchema,
    prefix: str,
) -> None:
    block_name, _ = block_name_and_classes(block)
    if not block_name or block_name in NON_EDITABLE_BLOCKS:
        return

    definition = schema.get_definition(block_name)
    if definition is None:
        logger.debug("[annotator] no definition for block=%s", block_name)

    add_attributes(
        block,
        {
            "resource": f"{prefix}section-{s_index}/block-{b_index}",
            "type": "component",
            "label": definition.title if definition else f"{block_name} (no definition)",
            "model": block_name,
            "component": block_name,
        },
    )

    if definition is not None and definition.is_columns:
        _annotate_columns(block, block_name, f"{prefix}section-{s_index}/columns-{b_index}", schema)
        return

    if definition is not None and definition.is_key_value:
        _annotate_key_value(block, block_name, schema)
        return

    add_block_field_attributes(block, block_name, schema)
    _annotate_items(block, block_name, f"{prefix}section-{s_index}/block-{b_index}", schema)


def _annotate_section(
    section: Tag,
    s_index: int,
    schema: ComponentSchema,
    prefix: str,
) -> None:
    section_def = schema.get_definition("section")
    attributes = {
        "resource": f"{prefix}section-{s_index}",
        "type": "container",
        "label": section_def.title if section_def else "Section",
        "model": "section",
        "component": "section",
        "behavior": "component",
    }
    if section_def is not None and section_def.filter:
        attributes["filter"] = section_def.filter
    add_attributes(section, attributes)

    for w_index, wrapper in enumerate(wrap_paragraphs(section)):
        add_attributes(
            wrapper,
            {
                "resource": f"{prefix}section-{s_index}/text-{w_index}",
                "type": "richtext",
                "label": "Text",
                "prop": "root",
                "component": "text",
                "behavior": "component",
            },
        )

    for i_index, picture in enumerate(child_elements(section, "picture")):
        add_attributes(
            picture,
            {
                "resource": f"{prefix}section-{s_index}/asset-{i_index}",
                "label": "Image",
                "prop": "image",
                "type": "media",
                "component": "image",
            },
        )

    for b_index, block in enumerate(child_elements(section, "div")):
        _annotate_block(block, s_index, b_index, schema, prefix)


def inject_attributes(
    tree: Tag,
    schema: ComponentSchema,
    resource_prefix: str = DEFAULT_RESOURCE_PREFIX,
) -> Tag:
    """
    body を起点としたツリーに data-aue-* 属性を付与する（in-place）。

    - page-metadata モデルがあれば body をページリソースにする（body の無い断片では付けない）
    - main をルートコンテナ、main 直下の div をセクションとして扱う
    - セクション内はテキストのラップ・画像・ブロックの順に処理する

    スキーマに情報が無い場合は例外にせず、既定ラベルで済ませる。
    """
    root = tree
    if isinstance(tree, BeautifulSoup) and tree.find("body") is not None:
        root = tree.find("body")

    page_model = schema.get_model("page-metadata")
    if page_model is not None and isinstance(root, BeautifulSoup):
        # BeautifulSoup 自身の属性は出力されないので、body が無ければページリソースは付けない
        logger.warning("[annotator] no <body> in tree, page resource not tagged")
    elif page_model is not None:
        add_attributes(
            root,
            {
                "resource": f"{resource_prefix}page",
                "label": "Page",
                "type": "component",
                "model": "page-metadata",
            },
        )

    main = root if is_element(root, "main") else root.find("main")
    if main is None:
        logger.info("[annotator] no <main> found, nothing to annotate")
        return tree

    add_attributes(
        main,
        {
            "resource": f"{resource_prefix}main",
            "type": "container",
            "label": "Main Content",
            "filter": "main",
        },
    )

    sections = child_elements(main, "div")
    for s_index, section in enumerate(sections):
        _annotate_section(section, s_index, schema, resource_prefix)

    logger.debug("[annotator] annotated sections=%s", len(sections))
    return tree
