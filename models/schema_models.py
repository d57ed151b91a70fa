# models/schema_models.py

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------
# フィールド種別
# -----------------------------------------
FieldKind = Literal[
    "text",
    "richtext",
    "reference",
    "multiselect",
    "container",
]


class _SchemaRecord(BaseModel):
    """スキーマ系レコードの共通設定（immutable / alias 受け付け）。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


# -----------------------------------------
# component-definition
# -----------------------------------------
class DaFieldSelector(_SchemaRecord):
    """ブロック内のフィールド名と、その要素を指すセレクタの対応。"""

    name: str
    selector: Optional[str] = None


class DaPlugin(_SchemaRecord):
    """
    エディタ向けプラグイン情報。
    - behaviour / type: ブロックの振る舞いフラグ（columns / key-value）
    - unsafe_html: 挿入時のサンプル HTML
    - fields: フィールド名 → セレクタ
    """

    name: Optional[str] = None
    type: Optional[str] = None
    behaviour: Optional[str] = None
    unsafe_html: Optional[str] = Field(None, alias="unsafeHTML")
    fields: Optional[Tuple[DaFieldSelector, ...]] = None


class ComponentPlugins(_SchemaRecord):
    da: Optional[DaPlugin] = None


class ComponentDefinition(_SchemaRecord):
    title: str
    id: str
    model: Optional[str] = None
    filter: Optional[str] = None
    plugins: Optional[ComponentPlugins] = None

    @property
    def da(self) -> Optional[DaPlugin]:
        return self.plugins.da if self.plugins else None

    @property
    def is_columns(self) -> bool:
        da = self.da
        return bool(da) and (da.behaviour == "columns" or da.type == "columns-block")

    @property
    def is_key_value(self) -> bool:
        da = self.da
        return bool(da) and da.type == "key-value-block"


class DefinitionGroup(_SchemaRecord):
    title: str
    id: str
    components: Tuple[ComponentDefinition, ...] = ()


class ComponentDefinitionDocument(_SchemaRecord):
    groups: Tuple[DefinitionGroup, ...] = ()


# -----------------------------------------
# component-models
# -----------------------------------------
class ModelFieldOption(_SchemaRecord):
    name: str
    value: str


class ModelField(_SchemaRecord):
    """
    モデルの1フィールド。
    name はプロパティ名、またはブロック内要素を指すセレクタ。
    container の場合は fields に子フィールドを持つ。
    """

    component: FieldKind
    name: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    value_type: Optional[str] = Field(None, alias="valueType")
    multi: Optional[bool] = None
    hidden: Optional[bool] = None
    options: Optional[Tuple[ModelFieldOption, ...]] = None
    fields: Optional[Tuple["ModelField", ...]] = None


class ComponentModel(_SchemaRecord):
    id: str
    fields: Tuple[ModelField, ...] = ()


# -----------------------------------------
# component-filters
# -----------------------------------------
class ComponentFilter(_SchemaRecord):
    id: str
    components: Tuple[str, ...] = ()


# -----------------------------------------
# 3 つを束ねたスキーマ
# -----------------------------------------
class ComponentSchema(_SchemaRecord):
    """
    definitions / models / filters の3つ組。
    レンダリング中は不変で、ブロックの参照は必ず id で行う。
    """

    definitions: ComponentDefinitionDocument = Field(default_factory=ComponentDefinitionDocument)
    models: Tuple[ComponentModel, ...] = ()
    filters: Tuple[ComponentFilter, ...] = ()

    @classmethod
    def from_documents(
        cls,
        definition: Optional[Dict[str, Any]] = None,
        models: Optional[List[Dict[str, Any]]] = None,
        filters: Optional[List[Dict[str, Any]]] = None,
    ) -> "ComponentSchema":
        """JSON ドキュメントから生成する。不正な形なら ValidationError。"""
        return cls.model_validate(
            {
                "definitions": definition or {},
                "models": models or [],
                "filters": filters or [],
            }
        )

    def get_definition(self, component_id: Optional[str]) -> Optional[ComponentDefinition]:
        if not component_id:
            return None
        for group in self.definitions.groups:
            for component in group.components:
                if component.id == component_id:
                    return component
        return None

    def get_model(self, component_id: Optional[str]) -> Optional[ComponentModel]:
        if not component_id:
            return None
        return next((m for m in self.models if m.id == component_id), None)

    def get_filter(self, component_id: Optional[str]) -> Optional[ComponentFilter]:
        if not component_id:
            return None
        return next((f for f in self.filters if f.id == component_id), None)

    def definition_document(self) -> Dict[str, Any]:
        return self.definitions.model_dump(mode="json", by_alias=True, exclude_none=True)

    def models_document(self) -> List[Dict[str, Any]]:
        return [m.model_dump(mode="json", by_alias=True, exclude_none=True) for m in self.models]

    def filters_document(self) -> List[Dict[str, Any]]:
        return [f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in self.filters]

    def to_documents(self) -> Dict[str, Any]:
        """エディタに配信する3ドキュメントをまとめて返す。"""
        return {
            "component-definition": self.definition_document(),
            "component-models": self.models_document(),
            "component-filters": self.filters_document(),
        }
