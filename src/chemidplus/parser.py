"""
Parsing of ChemIDplus substance detail pages
"""
import re
import logging
from typing import List, Optional

import pandas as pd
from bs4 import BeautifulSoup

from .classifier import next_text_node
from .models import SubstanceRecord

logger = logging.getLogger(__name__)

# 取得方法
LIST_IN_DIV = "list_div"
LIST_IN_UL = "list_ul"
TEXT = "text"
TABLE = "table"

# (項目名, 見出しタグ, 見出し文字列, 取得方法, 除去する文字)
SECTIONS = [
    ("name", "h3", "Name of Substance", LIST_IN_DIV, None),
    ("synonyms", "h3", "Synonyms", LIST_IN_DIV, None),
    ("cas", "h3", "CAS Registry", LIST_IN_UL, None),
    ("inchi", "h3", "InChI", TEXT, re.compile(r"[\n\t]")),
    ("inchikey", "h3", "InChIKey", TEXT, re.compile(r"[\n\t\r]")),
    ("smiles", "h3", "Smiles", TEXT, re.compile(r"[\n\t\r]")),
    ("toxicity", "h2", "Toxicity", TABLE, None),
    ("physprop", "h2", "Physical Prop", TABLE, None),
]

NUMERIC_COLUMN = "Value"


def find_headings(document: BeautifulSoup, tag: str, text: str) -> list:
    """見出し文字列を部分一致（大文字小文字を区別）で検索"""
    return [h for h in document.find_all(tag) if text in h.get_text()]


def extract_list(headings: list, container_tag: str) -> Optional[List[str]]:
    """見出し直後のコンテナ内の li を取得"""
    items = []
    seen = set()
    for heading in headings:
        container = heading.find_next_sibling(container_tag)
        if container is None:
            continue
        for li in container.find_all("li"):
            if id(li) in seen:
                continue
            seen.add(id(li))
            items.append(li.get_text())
    return items or None


def extract_text(headings: list, strip_re: Optional[re.Pattern]) -> Optional[str]:
    """最初に一致した見出し直後のテキストノードを取得"""
    text = next_text_node(headings[0])
    if text is None:
        return None
    if strip_re is not None:
        text = strip_re.sub("", text)
    return text or None


def extract_table(headings: list) -> Optional[pd.DataFrame]:
    """見出し以降の div から最初の表を取得（次の同レベル見出しまで）"""
    for heading in headings:
        for sibling in heading.find_next_siblings():
            if sibling.name == heading.name:
                break
            if sibling.name != "div":
                continue
            table = sibling.find("table")
            if table is not None:
                df = parse_table(table)
                return None if df.empty else df
    return None


def parse_table(table) -> pd.DataFrame:
    """
    HTMLの表を DataFrame に変換
    先頭行がすべて th の場合は列名として使用、そうでなければ X1, X2, ...
    """
    rows = []
    for tr in table.find_all("tr"):
        cells = tr.find_all(["th", "td"])
        if cells:
            rows.append(cells)
    if not rows:
        return pd.DataFrame()

    header = None
    if all(cell.name == "th" for cell in rows[0]):
        header = [cell.get_text(strip=True) for cell in rows[0]]
        rows = rows[1:]

    values = [[cell.get_text(strip=True) for cell in row] for row in rows]
    width = max([len(header or [])] + [len(v) for v in values])
    if header is None:
        header = [f"X{i + 1}" for i in range(width)]
    header = header + [f"X{i + 1}" for i in range(len(header), width)]
    values = [v + [None] * (width - len(v)) for v in values]
    return pd.DataFrame(values, columns=header)


def coerce_numeric(table: pd.DataFrame, column: str = NUMERIC_COLUMN) -> pd.DataFrame:
    """指定列を数値に変換（変換できないセルは NaN）"""
    if column not in table.columns:
        logger.debug(f"列 '{column}' なし、数値変換をスキップ")
        return table
    table[column] = pd.to_numeric(table[column], errors="coerce")
    return table


def parse_detail(document: BeautifulSoup) -> SubstanceRecord:
    """物質詳細ページから SubstanceRecord を作成"""
    fields = {}
    for field_name, tag, text, kind, strip_re in SECTIONS:
        headings = find_headings(document, tag, text)
        if not headings:
            fields[field_name] = None
            continue
        if kind == LIST_IN_DIV:
            fields[field_name] = extract_list(headings, "div")
        elif kind == LIST_IN_UL:
            fields[field_name] = extract_list(headings, "ul")
        elif kind == TEXT:
            fields[field_name] = extract_text(headings, strip_re)
        elif kind == TABLE:
            fields[field_name] = extract_table(headings)

    if fields["physprop"] is not None:
        fields["physprop"] = coerce_numeric(fields["physprop"])

    missing = [k for k, v in fields.items() if v is None]
    if missing:
        logger.debug(f"取得できなかった項目: {', '.join(missing)}")
    return SubstanceRecord(**fields)
