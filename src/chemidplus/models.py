"""
Data models for ChemIDplus search and detail pages
"""
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Union

import pandas as pd

# 検索結果ページの分類
NOT_FOUND = "not_found"
DIRECT = "direct"
MULTIPLE = "multiple"

Distance = Union[str, float, None]


@dataclass
class Candidate:
    """検索結果一覧の候補 (名称, CAS番号)"""
    name: str
    cas: Optional[str]


@dataclass
class SearchPage:
    """検索結果ページと分類結果を格納するデータクラス"""
    document: Any
    kind: str  # "not_found", "direct", "multiple"
    candidates: List[Candidate] = field(default_factory=list)
    matched: Optional[str] = None
    source_url: Optional[str] = None


@dataclass
class MatchResult:
    """候補選択の結果"""
    candidate: Optional[Candidate] = None
    matched: Optional[str] = None
    distance: Distance = None

    @property
    def selected(self) -> bool:
        return self.candidate is not None


@dataclass
class SubstanceRecord:
    """物質詳細ページから取得した情報を格納するデータクラス

    取得できなかった項目は空リストではなく None で表す。
    matched / distance は由来情報 (一致した名称と選択方法) で、物質データとは別扱い。
    """
    name: Optional[List[str]] = None
    synonyms: Optional[List[str]] = None
    cas: Optional[List[str]] = None
    inchi: Optional[str] = None
    inchikey: Optional[str] = None
    smiles: Optional[str] = None
    toxicity: Optional[pd.DataFrame] = None
    physprop: Optional[pd.DataFrame] = None
    source_url: Optional[str] = None
    matched: Optional[str] = None
    distance: Distance = None

    def property_value(self, property_name: str) -> Optional[float]:
        """物性表から指定された物性の数値を取得"""
        if self.physprop is None or "Value" not in self.physprop.columns:
            return None
        if "Physical Property" not in self.physprop.columns:
            return None
        rows = self.physprop[self.physprop["Physical Property"] == property_name]
        if rows.empty:
            return None
        value = rows["Value"].iloc[0]
        if pd.isna(value):
            return None
        return float(value)

    def to_dict(self) -> dict:
        """JSON出力用の辞書に変換 (表は行ごとの辞書、NaN は None)"""
        return {
            "name": self.name,
            "synonyms": self.synonyms,
            "cas": self.cas,
            "inchi": self.inchi,
            "inchikey": self.inchikey,
            "smiles": self.smiles,
            "toxicity": _table_to_records(self.toxicity),
            "physprop": _table_to_records(self.physprop),
            "source_url": self.source_url,
            "matched": self.matched,
            "distance": _finite(self.distance),
        }


def _finite(value: Any) -> Any:
    """NaN・無限大は None に変換（JSONの標準外の値を出力しない）"""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _table_to_records(table: Optional[pd.DataFrame]) -> Optional[List[dict]]:
    if table is None:
        return None
    records = []
    for row in table.to_dict(orient="records"):
        records.append({
            k: _finite(v)
            for k, v in row.items()
        })
    return records


@dataclass
class QueryResult:
    """入力1件分の結果 (入力位置で識別)"""
    index: int
    query: Any
    record: Optional[SubstanceRecord] = None

    @property
    def found(self) -> bool:
        return self.record is not None


class ResultSet:
    """入力順に並んだ QueryResult の集合

    同じ検索語が複数回入力された場合も、入力位置ごとに別の結果として保持する。
    """

    def __init__(self, results: Optional[List[QueryResult]] = None):
        self._results = list(results or [])

    def append(self, result: QueryResult) -> None:
        self._results.append(result)

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[QueryResult]:
        return iter(self._results)

    def __getitem__(self, index: int) -> QueryResult:
        return self._results[index]

    def __repr__(self) -> str:
        found = sum(1 for r in self._results if r.found)
        return f"ResultSet({found}/{len(self._results)} found)"

    @property
    def queries(self) -> List[Any]:
        return [r.query for r in self._results]

    def get(self, query: Any) -> Optional[QueryResult]:
        """検索語に一致する最初の結果を取得"""
        for result in self._results:
            if result.query == query:
                return result
        return None

    def records(self) -> List[Optional[SubstanceRecord]]:
        return [r.record for r in self._results]

    def property_values(self, property_name: str) -> List[Optional[float]]:
        """全結果から指定された物性値を入力順に抽出 (例: "log P (octanol-water)")"""
        return [
            r.record.property_value(property_name) if r.found else None
            for r in self._results
        ]
