"""
Batch processing and export of ChemIDplus query results
"""
import json
import logging
import datetime
from pathlib import Path
from typing import Any, List

import pandas as pd

from src.chemidplus.client import ChemIDplusClient
from src.chemidplus.models import ResultSet, _finite
from config.settings import OUTPUT_TIMESTAMP_FORMAT


class SubstanceDataProcessor:
    """物質情報の一括取得・保存を担当するクラス"""

    def __init__(self, client: ChemIDplusClient = None):
        self.logger = logging.getLogger(__name__)
        self.client = client or ChemIDplusClient()

    def load_queries(self, input_path: Path) -> List[Any]:
        """
        入力ファイルから検索語を読み込み
        - .json: 文字列のリスト、または "query" キーを持つ辞書のリスト
        - .txt: 1行1件
        空の検索語は None（該当なし扱い）として残す
        """
        self.logger.info(f"入力ファイル読み込み: {input_path}")

        try:
            if input_path.suffix.lower() == ".json":
                with open(input_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                items = [item.get("query") if isinstance(item, dict) else item for item in data]
            else:
                with open(input_path, "r", encoding="utf-8") as f:
                    items = [line.rstrip("\r\n") for line in f]
                while items and not items[-1].strip():
                    items.pop()
        except Exception as e:
            self.logger.error(f"入力ファイル読み込み失敗: {e}")
            raise

        queries = []
        for item in items:
            if item is None or (isinstance(item, str) and not item.strip()):
                queries.append(None)
            else:
                queries.append(str(item).strip())

        self.logger.info(f"検索語読み込み完了: {len(queries)} 件")
        return queries

    def run(self, queries: List[Any], from_: str = "name", match: str = "best") -> ResultSet:
        """検索語を順番に問い合わせ"""
        self.logger.info(f"ChemIDplus検索開始: {len(queries)} 件 (from={from_}, match={match})")
        return self.client.query(queries, from_=from_, match=match, progress=True)

    def create_dataframe(self, results: ResultSet) -> pd.DataFrame:
        """検索結果の一覧を DataFrame に変換（入力1件につき1行）"""
        rows = []
        for r in results:
            rec = r.record
            rows.append({
                "index": r.index,
                "query": r.query,
                "found": r.found,
                "name": rec.name[0] if rec and rec.name else pd.NA,
                "cas": rec.cas[0] if rec and rec.cas else pd.NA,
                "inchikey": rec.inchikey if rec and rec.inchikey else pd.NA,
                "smiles": rec.smiles if rec and rec.smiles else pd.NA,
                "matched": rec.matched if rec and rec.matched else pd.NA,
                "distance": rec.distance if rec and rec.distance is not None else pd.NA,
                "source_url": rec.source_url if rec else pd.NA,
            })
        df = pd.DataFrame(rows, columns=[
            "index", "query", "found", "name", "cas", "inchikey",
            "smiles", "matched", "distance", "source_url",
        ])
        self.logger.info(f"DataFrame作成完了: {len(df)} 行")
        return df

    def save_results(self, results: ResultSet, input_path: Path) -> dict:
        """結果をファイルに保存し、出力先を返す"""
        timestamp = datetime.datetime.now().strftime(OUTPUT_TIMESTAMP_FORMAT)

        out_csv = input_path.with_name(f"{input_path.stem}_chemidplus_results_{timestamp}.csv")
        out_json = input_path.with_name(f"{input_path.stem}_chemidplus_records_{timestamp}.json")
        outputs = {"csv": out_csv, "json": out_json}

        df = self.create_dataframe(results)
        try:
            df.to_csv(out_csv, index=False, encoding="utf-8-sig")
            self.logger.info(f"CSV保存完了: {out_csv.name}")

            records = [
                {"index": r.index, "query": _finite(r.query),
                 "record": r.record.to_dict() if r.found else None}
                for r in results
            ]
            with open(out_json, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2, allow_nan=False)
            self.logger.info(f"JSON保存完了: {out_json.name}")

            # 失敗記録の保存
            notfound = [r for r in results if not r.found]
            if notfound:
                miss_file = input_path.with_name(f"{input_path.stem}_miss_{timestamp}.json")
                with open(miss_file, "w", encoding="utf-8") as f:
                    json.dump([{"row": r.index, "query": _finite(r.query)} for r in notfound],
                              f, ensure_ascii=False, indent=2, allow_nan=False)
                outputs["miss"] = miss_file
                self.logger.info(f"失敗記録: {len(notfound)} 行 → {miss_file.name}")
        except OSError as e:
            self.logger.error(f"結果保存失敗: {e}")
            raise

        self._log_statistics(df, out_csv, out_json)
        return outputs

    def _log_statistics(self, df: pd.DataFrame, out_csv: Path, out_json: Path) -> None:
        """処理結果の統計情報をログ出力"""
        total_records = len(df)
        found = int(df["found"].sum())
        direct = sum(1 for d in df["distance"] if isinstance(d, str) and d == "direct match")
        inchikey_total = int(df["inchikey"].notna().sum())
        rate = found / total_records * 100 if total_records else 0.0

        self.logger.info("✅ 処理完了:")
        self.logger.info(f"  取得成功: {found}/{total_records} 件 ({rate:.1f}%)")
        self.logger.info(f"  直接一致: {direct} 件, 候補から選択: {found - direct} 件")
        self.logger.info(f"  InChIKey取得: {inchikey_total}/{total_records} 件")
        self.logger.info(f"  CSV結果: {out_csv.name}")
        self.logger.info(f"  JSON結果: {out_json.name}")
