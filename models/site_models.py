# models/site_models.py

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel


class SiteContext(BaseModel):
    """
    編集対象ページの位置情報。
    - org / site / ref: コンテンツリポジトリの識別子
    - pathname: サイト内のページパス（例: /docs/index）
    """

    org: str
    site: str
    ref: str = "main"
    pathname: str = "/"

    # ローカル開発時は head のパスを /{org}/{site} 配下に書き換える
    is_local: bool = False


class AemContext(BaseModel):
    """配信ホスト側の URL 群。SiteContext と設定値から組み立てる。"""

    live_url: str
    ue_url: Optional[str] = None
    ue_service: Optional[str] = None

    @classmethod
    def from_site(
        cls,
        site_ctx: SiteContext,
        ue_url: Optional[str] = None,
        ue_service: Optional[str] = None,
    ) -> "AemContext":
        host = f"{site_ctx.ref}--{site_ctx.site}--{site_ctx.org}"
        return cls(
            live_url=f"https://{host}.aem.live",
            ue_url=ue_url,
            ue_service=ue_service,
        )
