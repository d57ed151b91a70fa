# models/library_models.py

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class BlockCatalogEntry(BaseModel):
    """
    ブロックライブラリ（blocks.json）の1行。
    - path: サンプルページの URL
    - items: コンテナ型ブロックの子要素ラベル（任意）
    """

    name: str
    path: str
    group: str = "blocks"
    items: Optional[str] = None


class BlockVariant(BaseModel):
    """
    サンプルページから抽出したブロックの1バリアント。
    name は直前の見出しがあればその文字列、無ければブロック名。
    """

    id: str
    name: str
    model: str
    classes: List[str] = Field(default_factory=list)
    html: Optional[str] = None

    # 直後の library-metadata ブロックから読み取った追加情報
    metadata: Dict[str, str] = Field(default_factory=dict)

    @property
    def key(self) -> tuple:
        return (self.id, self.name)


class BlockLibraryEntry(BaseModel):
    name: str
    path: str
    group: str = "blocks"
    items: Optional[str] = None
    variants: List[BlockVariant] = Field(default_factory=list)
