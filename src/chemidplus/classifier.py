"""
Classification of ChemIDplus search result pages
"""
import re
import logging
from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Comment

from .models import Candidate, SearchPage, NOT_FOUND, DIRECT, MULTIPLE
from config.settings import MIN_CAS_LENGTH

logger = logging.getLogger(__name__)

NO_RECORDS_TEXT = "The following query produced no records:"
RESULTS_TITLE_RE = re.compile(r"^ChemIDplus Results - Chemical information")
RECORD_LINK_TITLE = "Open record details"
NAME_HEADING = "Name of Substance"


def next_text_node(element) -> Optional[str]:
    """
    要素の直後にある最初の兄弟テキストノードを取得
    空白のみの場合は None（後続のノードは見ない）
    """
    for sibling in element.next_siblings:
        if isinstance(sibling, NavigableString) and not isinstance(sibling, Comment):
            return sibling.strip() or None
    return None


def first_substance_name(document: BeautifulSoup) -> Optional[str]:
    """「Name of Substance」見出し直後の div から最初の名称を取得"""
    for heading in document.find_all("h3"):
        if NAME_HEADING not in heading.get_text():
            continue
        container = heading.find_next_sibling("div")
        if container is None:
            continue
        item = container.find("li")
        if item is not None:
            return item.get_text()
    return None


def extract_candidates(document: BeautifulSoup) -> List[Candidate]:
    """
    検索結果一覧から候補 (名称, CAS番号) を抽出
    CAS番号が MIN_CAS_LENGTH 文字未満の候補は除外
    """
    candidates = []
    for link in document.find_all("a", attrs={"title": RECORD_LINK_TITLE}):
        name = link.get_text()
        cas = next_text_node(link) or ""
        if len(cas) < MIN_CAS_LENGTH:
            logger.debug(f"候補 '{name}': CAS番号なし、除外")
            continue
        candidates.append(Candidate(name=name, cas=cas))
    return candidates


def classify_search_page(document: BeautifulSoup, search_url: str) -> SearchPage:
    """検索結果ページを「該当なし」「直接一致」「複数候補」に分類"""
    headings = [h.get_text().strip() for h in document.find_all("h3")]
    if NO_RECORDS_TEXT in headings:
        return SearchPage(document, NOT_FOUND)

    title = document.find("title")
    title_text = title.get_text().strip() if title is not None else ""
    if RESULTS_TITLE_RE.match(title_text):
        return SearchPage(document, MULTIPLE, candidates=extract_candidates(document))

    return SearchPage(
        document,
        DIRECT,
        matched=first_substance_name(document),
        source_url=search_url.split("?", 1)[0],
    )
