# services/crawler.py

from typing import Any, Optional

import requests

from app.config import settings

DEFAULT_HEADERS = {
    "User-Agent": "ue-site-bridge/0.1 (+dev)",
}


def _get(url: str, timeout: Optional[float], auth_token: Optional[str]) -> requests.Response:
    headers = dict(DEFAULT_HEADERS)
    if auth_token:
        headers["Authorization"] = auth_token
    resp = requests.get(url, headers=headers, timeout=timeout or settings.fetch_timeout)
    resp.raise_for_status()
    return resp


def fetch_html(url: str, timeout: Optional[float] = None, auth_token: Optional[str] = None) -> str:
    """
    単純な GET で HTML を取得する。
    リトライはしない。タイムアウトは呼び出し側で決める。
    """
    return _get(url, timeout, auth_token).text


def fetch_json(url: str, timeout: Optional[float] = None, auth_token: Optional[str] = None) -> Any:
    """GET して JSON を返す。パースできなければ ValueError。"""
    return _get(url, timeout, auth_token).json()
