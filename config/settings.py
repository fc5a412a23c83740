"""
Configuration settings for ChemIDplus substance queries
"""

# ChemIDplus settings
BASE_URL = "https://chem.nlm.nih.gov/chemidplus"
ROWS_PER_PAGE = 50
TIMEOUT = 30

# 検索種別ごとのパス
SEARCH_PATHS = {
    "rn": "rn",
    "cas": "rn",
    "name": "name",
    "inchikey": "inchikey",
}
MATCH_METHODS = ("best", "first", "ask", "na")

# CAS番号としてみなす最小文字数
MIN_CAS_LENGTH = 5

# Request delay (gamma distribution, seconds)
DELAY_SHAPE = 15
DELAY_SCALE = 1 / 10

# HTTP headers
USER_AGENT = {"User-Agent": "Mozilla/5.0 (ChemIDplus Substance Query)"}

# File extensions and patterns
SUPPORTED_INPUT_FORMATS = [".json", ".txt"]
OUTPUT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Logging
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_LEVEL = "INFO"
