"""
Pytest configuration and shared fixtures.
"""

import pytest
import requests
from bs4 import BeautifulSoup

BASE_URL = "https://chem.nlm.nih.gov/chemidplus"


DETAIL_HTML = """
<html>
<head><title>Formaldehyde [USAN:INN] - Substance Information</title></head>
<body>
<h2>Names and Synonyms</h2>
<h3>Name of Substance</h3>
<div><ul><li>Formaldehyde</li><li>Formaldehyde [USAN:INN]</li></ul></div>
<h3>Synonyms</h3>
<div><ul><li>Formalin</li><li>Methanal</li><li>Oxomethane</li></ul></div>
<h2>Registry Numbers</h2>
<h3>CAS Registry Number</h3>
<ul><li>50-00-0</li></ul>
<h2>Structure Descriptors</h2>
<h3>InChI</h3>
InChI=1S/CH2O/c1-2/h1H2
<h3>InChIKey</h3>
WSFSSNUMVMOOMR-UHFFFAOYSA-N\r
<h3>Smiles</h3>
\tC=O
<h2>Toxicity</h2>
<div>
<table>
<tr><th>Organism</th><th>Test Type</th><th>Route</th><th>Reported Dose (Normalized Dose)</th></tr>
<tr><td>rat</td><td>LD50</td><td>oral</td><td>100mg/kg (100mg/kg)</td></tr>
<tr><td>mouse</td><td>LC50</td><td>inhalation</td><td>414mg/m3/4H (414mg/m3)</td></tr>
</table>
</div>
<h2>Physical Properties</h2>
<div>
<table>
<tr><th>Physical Property</th><th>Value</th><th>Units</th><th>Temp (deg C)</th><th>Source</th></tr>
<tr><td>Melting Point</td><td>-92</td><td>deg C</td><td></td><td>EXP</td></tr>
<tr><td>log P (octanol-water)</td><td>0.35</td><td>(none)</td><td></td><td>EXP</td></tr>
<tr><td>Water Solubility</td><td>miscible</td><td>mg/L</td><td>25</td><td>EXP</td></tr>
</table>
</div>
</body>
</html>
"""

MINIMAL_DETAIL_HTML = """
<html>
<head><title>Unknown substance - Substance Information</title></head>
<body>
<h3>Name of Substance</h3>
<div><ul><li>Unknown substance</li></ul></div>
<h3>Synonyms</h3>
<div><p>No synonyms available</p></div>
</body>
</html>
"""

RESULTS_HTML = """
<html>
<head><title>ChemIDplus Results - Chemical information for name startswith Formaldehyde</title></head>
<body>
<div class="results">
<div><a title="Open record details" href="/chemidplus/rn/8013-13-6">Formaldehyde solution [USP]</a> 8013-13-6</div>
<div><a title="Open record details" href="/chemidplus/rn/0">Formaldehyde polymer</a> NA</div>
<div><a title="Open record details" href="/chemidplus/rn/50-00-0">Formaldehyde</a> 50-00-0</div>
<div><a title="Open record details" href="/chemidplus/rn/30525-89-4">Paraformaldehyde</a> 30525-89-4</div>
</div>
</body>
</html>
"""

RN_RESULTS_HTML = """
<html>
<head><title>ChemIDplus Results - Chemical information for rn startswith 50-00-0</title></head>
<body>
<div><a title="Open record details" href="/chemidplus/rn/50-00-0">Formaldehyde</a> 50-00-0</div>
<div><a title="Open record details" href="/chemidplus/rn/50-00-0">Formaldehyde [USAN:INN]</a> 50-00-0</div>
</body>
</html>
"""

EMPTY_RESULTS_HTML = """
<html>
<head><title>ChemIDplus Results - Chemical information for name startswith Resin</title></head>
<body>
<div><a title="Open record details" href="#">Resin, unknown grade</a> </div>
<div><a title="Open record details" href="#">Resin mixture</a> NA</div>
</body>
</html>
"""

NOT_FOUND_HTML = """
<html>
<head><title>ChemIDplus - Search Results</title></head>
<body>
<h3>The following query produced no records:</h3>
<div>Name startswith xxxx-not-a-real-chemical</div>
</body>
</html>
"""


def search_url(path: str, query: str) -> str:
    return f"{BASE_URL}/{path}/startswith/{query}?DT_START_ROW=0&DT_ROWS_PER_PAGE=50"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """In-memory session: maps URLs to HTML, responses or exceptions."""

    def __init__(self, pages: dict, log: list):
        self.pages = pages
        self.log = log
        self.closed = False

    def get(self, url, **kwargs):
        self.log.append(url)
        page = self.pages.get(url)
        if page is None:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, FakeResponse):
            return page
        return FakeResponse(page)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeWeb:
    """Session factory that records fetched URLs and opened sessions."""

    def __init__(self, pages: dict = None):
        self.pages = dict(pages or {})
        self.requested = []
        self.sessions = []

    def __call__(self):
        session = FakeSession(self.pages, self.requested)
        self.sessions.append(session)
        return session


class DelayRecorder:
    """Replaces the randomized sleep and counts calls."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return 0.0


@pytest.fixture
def detail_html() -> str:
    return DETAIL_HTML


@pytest.fixture
def detail_doc() -> BeautifulSoup:
    return BeautifulSoup(DETAIL_HTML, "lxml")


@pytest.fixture
def minimal_detail_doc() -> BeautifulSoup:
    return BeautifulSoup(MINIMAL_DETAIL_HTML, "lxml")


@pytest.fixture
def results_doc() -> BeautifulSoup:
    return BeautifulSoup(RESULTS_HTML, "lxml")


@pytest.fixture
def not_found_doc() -> BeautifulSoup:
    return BeautifulSoup(NOT_FOUND_HTML, "lxml")


@pytest.fixture
def delay() -> DelayRecorder:
    return DelayRecorder()


@pytest.fixture
def web() -> FakeWeb:
    """Fake service with a direct match, a multi-hit listing and a miss."""
    return FakeWeb({
        search_url("name", "Formaldehyde"): DETAIL_HTML,
        search_url("rn", "50-00-0"): RN_RESULTS_HTML,
        search_url("inchikey", "WSFSSNUMVMOOMR-UHFFFAOYSA-N"): DETAIL_HTML,
        search_url("name", "Formal"): RESULTS_HTML,
        search_url("name", "Resin"): EMPTY_RESULTS_HTML,
        search_url("name", "xxxx-not-a-real-chemical"): NOT_FOUND_HTML,
        f"{BASE_URL}/rn/50-00-0": DETAIL_HTML,
        f"{BASE_URL}/rn/8013-13-6": MINIMAL_DETAIL_HTML,
        f"{BASE_URL}/rn/30525-89-4": MINIMAL_DETAIL_HTML,
    })
