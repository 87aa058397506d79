from __future__ import annotations

from autoconfirm.application.extraction import (
    CODE_STRATEGIES,
    extract_code,
    extract_code_with_strategy,
    extract_links,
    filter_actionable,
)
from autoconfirm.domain.entities.link import ExtractedLink
from tests.helpers import VERIFICATION_HTML


KEYWORDS = ["yes", "confirm", "continue"]
MARKERS = ["update-primary-location", "set-primary-location", "account/travel/verify"]


def test_extract_links_without_anchors_is_empty() -> None:
    assert extract_links("<html><body><p>No links here</p></body></html>") == []
    assert extract_links("") == []


def test_extract_links_is_pure_and_keeps_document_order() -> None:
    first = extract_links(VERIFICATION_HTML)
    second = extract_links(VERIFICATION_HTML)

    assert first == second
    assert [l.label for l in first] == ["Yes, This Was Me", "Get help", "Unsubscribe"]
    assert first[0].target == "https://www.netflix.com/account/update-primary-location?nftoken=abc"


def test_extract_links_trims_labels_and_skips_empty_href() -> None:
    html = '<a href="">empty</a><a name="anchor">no href</a><a href=" https://x.test/a ">\n  Go  \n</a>'

    assert extract_links(html) == [ExtractedLink(target="https://x.test/a", label="Go")]


def test_filter_actionable_requires_domain_and_label_or_marker() -> None:
    links = [
        ExtractedLink("https://www.netflix.com/help", "Get help"),
        ExtractedLink("https://evil.example/confirm", "Confirm"),
        ExtractedLink("https://www.netflix.com/account/set-primary-location?t=1", "Click here"),
        ExtractedLink("https://www.netflix.com/ManageAccountAccess", "CONTINUE"),
    ]

    actionable = filter_actionable(links, "netflix.com", KEYWORDS, MARKERS)

    assert [l.target for l in actionable] == [
        "https://www.netflix.com/account/set-primary-location?t=1",
        "https://www.netflix.com/ManageAccountAccess",
    ]


def test_filter_actionable_collapses_duplicate_targets() -> None:
    link = ExtractedLink("https://www.netflix.com/account/update-primary-location?x=1", "Yes, this was me")
    duplicate = ExtractedLink(link.target, "Confirm")

    assert filter_actionable([link, duplicate], "netflix.com", KEYWORDS, MARKERS) == [link]


def test_extract_code_from_next_cell() -> None:
    assert extract_code("<td>Enter this code to sign in</td><td>4821</td>") == "4821"


def test_extract_code_ignores_spacing_inside_next_cell() -> None:
    html = "<table><tr><td>Enter this code to sign in</td><td> 4 8 2 1 </td></tr></table>"

    assert extract_code_with_strategy(html) == ("4821", "next_cell")


def test_extract_code_uses_innermost_phrase_cell() -> None:
    html = (
        "<table><tr><td>"
        "<table><tr><td>Enter this code to sign in</td><td>3141</td></tr></table>"
        "</td></tr></table>"
    )

    assert extract_code_with_strategy(html) == ("3141", "next_cell")


def test_extract_code_falls_back_to_same_row() -> None:
    html = (
        "<table><tr><td>Enter this code to sign in: 7350</td></tr>"
        "<tr><td>Thanks, the Netflix team</td></tr></table>"
    )

    assert extract_code_with_strategy(html) == ("7350", "same_row")


def test_extract_code_falls_back_to_raw_markup_window() -> None:
    html = '<p>Enter this code to sign in</p><div style="font-size:32px">5521</div>'

    assert extract_code_with_strategy(html) == ("5521", "raw_window")


def test_extract_code_raw_window_is_bounded() -> None:
    html = "<p>Enter this code to sign in</p>" + "<span></span>" * 60 + "<div>5521</div>"

    assert extract_code(html) is None


def test_extract_code_prefers_emphasized_cell() -> None:
    html = (
        "<table><tr><td>1999</td>"
        '<td style="font-size:28px;letter-spacing:6px">6060</td></tr></table>'
    )

    assert extract_code_with_strategy(html) == ("6060", "emphasized_cell")


def test_extract_code_emphasis_tie_goes_to_document_order() -> None:
    assert extract_code("<table><tr><td>1111</td><td>2222</td></tr></table>") == "1111"


def test_extract_code_first_successful_strategy_wins() -> None:
    html = (
        "<table><tr><td>Enter this code to sign in</td><td>4821</td></tr>"
        '<tr><td style="font-weight:bold;font-size:40px">9999</td></tr></table>'
    )

    assert extract_code_with_strategy(html) == ("4821", "next_cell")


def test_extract_code_none_when_nothing_matches() -> None:
    assert extract_code("<p>Hello there, no code today.</p>") is None
    assert extract_code("") is None


def test_code_strategies_are_ranked_most_specific_first() -> None:
    assert [name for name, _ in CODE_STRATEGIES] == [
        "next_cell",
        "same_row",
        "raw_window",
        "emphasized_cell",
    ]
