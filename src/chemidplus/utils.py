"""
ChemIDplus HTTP utilities and helper functions
"""
import time
import logging
import urllib.parse
from typing import Optional

import numpy as np
import requests
from bs4 import BeautifulSoup
from config.settings import USER_AGENT, TIMEOUT, DELAY_SHAPE, DELAY_SCALE

logger = logging.getLogger(__name__)

_rng = np.random.default_rng()


def encode_query(query: str) -> str:
    """
    検索語をURLパス用にエンコード（予約文字も含めてエンコード）
    """
    return urllib.parse.quote(query, safe="")


def draw_delay(rng: Optional[np.random.Generator] = None) -> float:
    """ガンマ分布 (shape=15, scale=0.1, 平均約1.5秒) から待機時間を生成"""
    rng = rng or _rng
    return float(rng.gamma(DELAY_SHAPE, DELAY_SCALE))


def random_delay(rng: Optional[np.random.Generator] = None) -> float:
    """
    リクエスト前のランダム待機
    - 一定間隔のアクセスにならないよう、右に裾の長い分布から待機時間を取る
    """
    delay = draw_delay(rng)
    logger.debug(f"{delay:.2f}秒待機")
    time.sleep(delay)
    return delay


def fetch_document(session: requests.Session, url: str) -> Optional[BeautifulSoup]:
    """
    URLを取得してHTMLを解析
    - リトライは行わない
    - 通信エラー・解析エラーは None を返す（呼び出し側で該当なしとして扱う）
    """
    try:
        r = session.get(url, headers=USER_AGENT, timeout=TIMEOUT, allow_redirects=True)
        r.raise_for_status()
    except requests.exceptions.RequestException as e:
        if hasattr(e, 'response') and e.response is not None:
            logger.warning(f"HTTPエラー {e.response.status_code}: {url}")
        else:
            logger.warning(f"ネットワークエラー: {url} - {e}")
        return None

    try:
        return BeautifulSoup(r.text, "lxml")
    except Exception as e:
        logger.warning(f"HTML解析失敗: {url} - {e}")
        return None
