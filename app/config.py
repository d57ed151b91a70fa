# app/config.py

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    """

    # ---------- Universal Editor ----------
    # UE_HOST=https://da.live などを .env に書く想定
    ue_host: str | None = None
    ue_service: str | None = None

    # resource 属性の URN プレフィックス
    resource_prefix: str = "urn:ab:"

    # ---------- ブロックライブラリ ----------
    block_library_url: str = "https://content.da.live/mhaack/special-project/docs/library/blocks.json"

    # サンプルページを .plain.html で取得する配信ドメイン
    aem_origins: List[str] = ["hlx.page", "hlx.live", "aem.page", "aem.live"]

    # ライブラリ取得の並列数
    library_max_workers: int = 8

    # ---------- コンテンツホスト ----------
    # 画像 URL を相対化する対象ホスト
    content_hosts: List[str] = ["content.da.live", "stage-content.da.live"]

    # ---------- 通信 ----------
    fetch_timeout: float = 10.0

    # ローカル開発モード（head の script/link パスを書き換える）
    local_dev: bool = False

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
