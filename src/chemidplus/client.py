"""
ChemIDplus client for searching and retrieving chemical substance records
"""
import logging
from typing import Any, Callable, Iterable, Optional

import pandas as pd
import requests
from tqdm import tqdm

from .classifier import classify_search_page
from .matcher import choose_candidate
from .models import QueryResult, ResultSet, SubstanceRecord, NOT_FOUND, DIRECT
from .parser import parse_detail
from .utils import encode_query, fetch_document, random_delay
from config.settings import BASE_URL, ROWS_PER_PAGE, SEARCH_PATHS, MATCH_METHODS


class ChemIDplusClient:
    """ChemIDplus から物質情報を検索・取得するクライアント"""

    def __init__(self, base_url: str = BASE_URL, verbose: bool = True,
                 session_factory: Callable[[], requests.Session] = requests.Session,
                 delay: Callable[[], Any] = random_delay,
                 prompt: Callable[[str], str] = input):
        self.logger = logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/")
        self.verbose = verbose
        self.session_factory = session_factory
        self.delay = delay
        self.prompt = prompt

    def _notice(self, message: str) -> None:
        """verbose の場合は INFO、そうでなければ DEBUG で出力"""
        self.logger.log(logging.INFO if self.verbose else logging.DEBUG, message)

    def build_search_url(self, query: str, from_: str) -> str:
        """検索URLを作成（最大 ROWS_PER_PAGE 件）"""
        path = SEARCH_PATHS[from_]
        return (f"{self.base_url}/{path}/startswith/{encode_query(query)}"
                f"?DT_START_ROW=0&DT_ROWS_PER_PAGE={ROWS_PER_PAGE}")

    def build_detail_url(self, cas: str) -> str:
        return f"{self.base_url}/rn/{cas}"

    def _fetch(self, session: requests.Session, url: str):
        self._notice(url)
        self.delay()
        return fetch_document(session, url)

    def query_one(self, query: Any, from_: str = "name",
                  match: str = "best") -> Optional[SubstanceRecord]:
        """
        1件の検索語から物質情報を取得

        Returns:
            SubstanceRecord、該当なし・取得失敗の場合は None
        """
        _check_arguments(from_, match)

        if pd.isna(query):
            self._notice("検索語が空です。該当なしを返します")
            return None

        query = str(query)
        search_url = self.build_search_url(query, from_)

        # 接続は検索1件ごとに開き、どの経路で終わっても閉じる
        with self.session_factory() as session:
            document = self._fetch(session, search_url)
            if document is None:
                self._notice(f"'{query}': 取得失敗。該当なしを返します")
                return None

            page = classify_search_page(document, search_url)

            if page.kind == NOT_FOUND:
                self._notice(f"'{query}': 該当なし")
                return None

            if page.kind == DIRECT:
                record = parse_detail(page.document)
                record.source_url = page.source_url
                record.matched = page.matched
                record.distance = "direct match"
                return record

            self._notice(f"'{query}': 複数の候補 ({len(page.candidates)} 件)")
            if match == "na":
                self._notice(f"'{query}': 照合方法 'na' のため該当なしを返します")
                return None

            result = choose_candidate(page.candidates, match, query, prompt=self.prompt)
            if not result.selected or not result.candidate.cas:
                self._notice(f"'{query}': CAS番号が見つかりません。該当なしを返します")
                return None
            self._notice(f"'{query}': '{result.matched}' ({result.candidate.cas}) を採用 "
                         f"[{match}: {result.distance}]")

            detail_url = self.build_detail_url(result.candidate.cas)
            document = self._fetch(session, detail_url)
            if document is None:
                self._notice(f"'{query}': 詳細ページ取得失敗。該当なしを返します")
                return None

        record = parse_detail(document)
        record.source_url = detail_url
        record.matched = result.matched
        record.distance = result.distance
        return record

    def query(self, queries: Iterable[Any], from_: str = "name", match: str = "best",
              progress: bool = False) -> ResultSet:
        """
        複数の検索語を順番に処理

        Args:
            queries: 検索語のリスト（文字列1件も可）
            from_: "name", "rn", "cas", "inchikey"
            match: "best", "first", "ask", "na"
            progress: tqdm の進捗バーを表示するか

        Returns:
            入力順・入力件数と同じ ResultSet
        """
        _check_arguments(from_, match)
        if isinstance(queries, str):
            queries = [queries]
        queries = list(queries)

        results = ResultSet()
        for idx, query in enumerate(tqdm(queries, desc="ChemIDplus検索", disable=not progress)):
            record = self.query_one(query, from_=from_, match=match)
            results.append(QueryResult(index=idx, query=query, record=record))

        found = sum(1 for r in results if r.found)
        self._notice(f"検索完了: {found}/{len(results)} 件取得")
        return results


def _check_arguments(from_: str, match: str) -> None:
    if from_ not in SEARCH_PATHS:
        raise ValueError(f"不明な検索種別: {from_} (選択肢: {', '.join(SEARCH_PATHS)})")
    if match not in MATCH_METHODS:
        raise ValueError(f"不明な照合方法: {match} (選択肢: {', '.join(MATCH_METHODS)})")
