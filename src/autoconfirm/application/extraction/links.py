"""Anchor extraction from HTML email bodies."""

from __future__ import annotations

from bs4 import BeautifulSoup

from autoconfirm.domain.entities.link import ExtractedLink


def extract_links(html: str) -> list[ExtractedLink]:
    """Return every anchor with a non-empty href, in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    links: list[ExtractedLink] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        links.append(ExtractedLink(target=href, label=anchor.get_text().strip()))
    return links


def filter_actionable(
    links: list[ExtractedLink],
    domain: str,
    keywords: list[str],
    path_markers: list[str],
) -> list[ExtractedLink]:
    """Keep links on the verification domain that look like a confirm step.

    A link qualifies when its target contains ``domain`` and either its label
    contains one of ``keywords`` (case-insensitive) or its target contains one
    of ``path_markers``. Repeated targets are collapsed to the first one.
    """
    domain = domain.lower()
    keywords = [k.lower() for k in keywords]
    markers = [m.lower() for m in path_markers]

    actionable: list[ExtractedLink] = []
    seen: set[str] = set()
    for link in links:
        target = link.target.lower()
        if domain not in target:
            continue
        label = link.label.lower()
        if not (any(k in label for k in keywords) or any(m in target for m in markers)):
            continue
        if link.target in seen:
            continue
        seen.add(link.target)
        actionable.append(link)
    return actionable
