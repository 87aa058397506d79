"""Sign-in code extraction.

Netflix sends the 4-digit code in a table next to the sentence
"Enter this code to sign in". The markup changes often, so extraction is a
ranked chain of strategies: the first one that finds a code wins, even if a
later one would also match. To support a new layout, add a strategy to
``CODE_STRATEGIES`` at the right rank.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

CODE_PHRASE = "enter this code to sign in"
RAW_WINDOW_CHARS = 500

CODE_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
EXACT_CODE_RE = re.compile(r"^\d{4}$")
RAW_PHRASE_RE = re.compile(
    CODE_PHRASE.replace(" ", r"\s+") + r"(?P<tail>[\s\S]{0,%d})" % RAW_WINDOW_CHARS,
    re.IGNORECASE,
)
EMPHASIS_STYLE_HINTS = ("font-size", "font-weight", "letter-spacing")
EMPHASIS_TAGS = ("b", "strong")

Strategy = Callable[[BeautifulSoup, str], Optional[str]]


def _cell_text(cell: Tag) -> str:
    return " ".join(cell.get_text(" ").split())


def _phrase_cells(soup: BeautifulSoup) -> list[Tag]:
    """Innermost <td> elements whose text contains the code phrase."""
    cells = []
    for cell in soup.find_all("td"):
        if CODE_PHRASE not in _cell_text(cell).lower():
            continue
        nested = any(CODE_PHRASE in _cell_text(inner).lower() for inner in cell.find_all("td"))
        if not nested:
            cells.append(cell)
    return cells


def code_from_next_cell(soup: BeautifulSoup, html: str) -> Optional[str]:
    for cell in _phrase_cells(soup):
        following = cell.find_next("td")
        if following is None:
            continue
        compact = re.sub(r"\s+", "", following.get_text())
        match = CODE_RE.search(compact)
        if match:
            return match.group(1)
    return None


def code_from_same_row(soup: BeautifulSoup, html: str) -> Optional[str]:
    for cell in _phrase_cells(soup):
        row = cell.find_parent("tr")
        if row is None:
            continue
        match = CODE_RE.search(_cell_text(row))
        if match:
            return match.group(1)
    return None


def code_near_phrase(soup: BeautifulSoup, html: str) -> Optional[str]:
    for phrase in RAW_PHRASE_RE.finditer(html):
        match = CODE_RE.search(phrase.group("tail"))
        if match:
            return match.group(1)
    return None


def _emphasis_score(cell: Tag) -> int:
    style = (cell.get("style") or "").lower()
    score = sum(1 for hint in EMPHASIS_STYLE_HINTS if hint in style)
    for child in cell.find_all(True):
        child_style = (child.get("style") or "").lower()
        score += sum(1 for hint in EMPHASIS_STYLE_HINTS if hint in child_style)
        if child.name in EMPHASIS_TAGS:
            score += 1
    return score


def code_from_emphasized_cell(soup: BeautifulSoup, html: str) -> Optional[str]:
    best: Optional[str] = None
    best_score = -1
    for cell in soup.find_all("td"):
        text = re.sub(r"\s+", "", cell.get_text())
        if not EXACT_CODE_RE.match(text):
            continue
        score = _emphasis_score(cell)
        # strict comparison keeps the earliest cell on ties
        if score > best_score:
            best, best_score = text, score
    return best


CODE_STRATEGIES: list[tuple[str, Strategy]] = [
    ("next_cell", code_from_next_cell),
    ("same_row", code_from_same_row),
    ("raw_window", code_near_phrase),
    ("emphasized_cell", code_from_emphasized_cell),
]


def extract_code_with_strategy(html: str) -> tuple[Optional[str], Optional[str]]:
    """Return ``(code, strategy_name)``; both None when nothing matched."""
    if not html:
        return None, None
    soup = BeautifulSoup(html, "html.parser")
    for name, strategy in CODE_STRATEGIES:
        code = strategy(soup, html)
        if code:
            return code, name
    return None, None


def extract_code(html: str) -> Optional[str]:
    return extract_code_with_strategy(html)[0]
