"""
Candidate selection for ChemIDplus searches with multiple hits
"""
import re
import logging
from typing import Callable, List, Optional

import pandas as pd
from rapidfuzz.distance import Levenshtein

from .models import Candidate, MatchResult

logger = logging.getLogger(__name__)

ANNOTATION_RE = re.compile(r" \[.*\]")
ASK_PROMPT = "\n番号を入力してください（それ以外の入力は該当なし）: "


def strip_annotation(name: str) -> str:
    """名称末尾の注記 " [...]" を除去"""
    return ANNOTATION_RE.sub("", name)


def normalized_distance(query: str, name: str) -> float:
    """
    編集距離を候補名の長さで正規化
    （検索語の長さではなく候補名の長さで割る）
    """
    if not name:
        return float("inf")
    return Levenshtein.distance(query, name) / len(name)


def choose_first(candidates: List[Candidate]) -> MatchResult:
    if not candidates:
        return MatchResult()
    return MatchResult(candidates[0], candidates[0].name, "first")


def choose_best(candidates: List[Candidate], query: str) -> MatchResult:
    """正規化編集距離が最小の候補を選択（同値の場合は先頭側）"""
    best = None
    best_distance = None
    best_name = None
    for candidate in candidates:
        name = strip_annotation(candidate.name)
        d = normalized_distance(query, name)
        logger.debug(f"候補 '{name}' ({candidate.cas}): 距離 {d:.3f}")
        if best_distance is None or d < best_distance:
            best, best_distance, best_name = candidate, d, name
    if best is None:
        return MatchResult()
    return MatchResult(best, best_name, best_distance)


def choose_interactive(candidates: List[Candidate],
                       prompt: Callable[[str], str] = input) -> MatchResult:
    """
    候補一覧を表示して番号を入力させる
    空入力・数値以外・範囲外の番号は「選択なし」
    """
    if not candidates:
        return MatchResult()

    table = pd.DataFrame(
        {"name": [c.name for c in candidates], "cas": [c.cas for c in candidates]}
    )
    print(table.to_string())

    try:
        answer = prompt(ASK_PROMPT).strip()
    except EOFError:
        logger.debug("入力なし (EOF)")
        return MatchResult()
    if not answer:
        return MatchResult()
    try:
        take = int(answer)
    except ValueError:
        logger.debug(f"不正な入力: {answer!r}")
        return MatchResult()
    if not 0 <= take < len(candidates):
        logger.debug(f"範囲外の番号: {take}")
        return MatchResult()
    return MatchResult(candidates[take], candidates[take].name, "interactive")


def choose_candidate(candidates: List[Candidate], match: str, query: str,
                     prompt: Callable[[str], str] = input) -> MatchResult:
    """
    照合方法に従って候補を1件選択

    Args:
        candidates: CAS番号の短い候補を除外済みの候補リスト
        match: "first", "best", "ask", "na"
        query: 元の検索語
        prompt: "ask" で使用する入力関数

    Returns:
        MatchResult（選択なしの場合は candidate が None）
    """
    if match == "na":
        return MatchResult()
    if match == "first":
        return choose_first(candidates)
    if match == "best":
        return choose_best(candidates, query)
    if match == "ask":
        return choose_interactive(candidates, prompt)
    raise ValueError(f"不明な照合方法: {match}")
