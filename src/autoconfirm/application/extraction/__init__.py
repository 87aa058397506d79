"""HTML content extraction for verification emails."""

from autoconfirm.application.extraction.codes import (
    CODE_STRATEGIES,
    extract_code,
    extract_code_with_strategy,
)
from autoconfirm.application.extraction.links import extract_links, filter_actionable

__all__ = [
    "CODE_STRATEGIES",
    "extract_code",
    "extract_code_with_strategy",
    "extract_links",
    "filter_actionable",
]
