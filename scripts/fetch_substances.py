#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
fetch_substances.py
ChemIDplus物質情報取得スクリプト

Usage:
    python scripts/fetch_substances.py --input data/input/substances.txt --from name --match best

Features:
- 名称・CAS番号・InChIKeyによる検索
- 複数候補の照合方法を選択可能 (best / first / ask / na)
- 入力順を保った結果一覧 (CSV) と詳細データ (JSON) を出力
"""

import argparse
import logging
import sys
from pathlib import Path

# プロジェクトルートをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.chemidplus.client import ChemIDplusClient
from src.data.processor import SubstanceDataProcessor
from config.settings import (
    LOG_FORMAT, LOG_LEVEL, MATCH_METHODS, SEARCH_PATHS, SUPPORTED_INPUT_FORMATS
)


def setup_logging(log_file: str = "chemidplus_fetch.log"):
    """ログ設定を初期化"""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger(__name__)
    logger.info("=== ChemIDplus物質情報取得スクリプト開始 ===")
    return logger


def process_substances_file(input_path: Path, from_: str, match: str, verbose: bool) -> None:
    """検索語ファイルを処理"""
    logger = logging.getLogger(__name__)
    processor = SubstanceDataProcessor(ChemIDplusClient(verbose=verbose))

    try:
        queries = processor.load_queries(input_path)
        if not queries:
            logger.error("検索語がありません。処理を終了します。")
            return

        results = processor.run(queries, from_=from_, match=match)
        processor.save_results(results, input_path)

    except Exception as e:
        logger.error(f"処理中にエラーが発生しました: {e}", exc_info=True)
        raise


def cli(argv=None):
    """コマンドライン インターフェース"""
    parser = argparse.ArgumentParser(
        description="ChemIDplusから物質情報（名称・CAS番号・InChIKey・物性・毒性）を取得",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
例:
    python scripts/fetch_substances.py --input data/input/substances.txt --from name
    python scripts/fetch_substances.py --input data/input/cas.json --from rn --match first

入力ファイル形式:
    .txt: 1行に1件の検索語
    .json: ["Formaldehyde", "Triclosan"] または [{"query": "50-00-0"}]
        """
    )

    parser.add_argument(
        "--input",
        required=True,
        help="検索語のファイルパス (.txt / .json)"
    )

    parser.add_argument(
        "--from",
        dest="from_",
        choices=sorted(SEARCH_PATHS),
        default="name",
        help="検索種別 (default: name)"
    )

    parser.add_argument(
        "--match",
        choices=MATCH_METHODS,
        default="best",
        help="複数候補の照合方法 (default: best)"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="URLや該当なしの通知を出力しない"
    )

    parser.add_argument(
        "--log",
        default="chemidplus_fetch.log",
        help="ログファイル名 (default: chemidplus_fetch.log)"
    )

    args = parser.parse_args(argv)

    # ログ設定
    logger = setup_logging(args.log)

    # 入力ファイル検証
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"入力ファイルが存在しません: {input_path}")
        return 1

    if input_path.suffix.lower() not in SUPPORTED_INPUT_FORMATS:
        logger.error(f"対応していない形式です ({', '.join(SUPPORTED_INPUT_FORMATS)}): {input_path}")
        return 1

    try:
        process_substances_file(input_path, args.from_, args.match, not args.quiet)
        return 0
    except Exception as e:
        logger.error(f"処理失敗: {e}")
        return 1
    finally:
        logger.info("=== ChemIDplus物質情報取得スクリプト終了 ===")


if __name__ == "__main__":
    exit_code = cli()
    sys.exit(exit_code)
