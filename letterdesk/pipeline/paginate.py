from __future__ import annotations

from typing import List

from .. import config
from ..models import TemplateKind


def page_budgets(template: TemplateKind) -> tuple[int, int]:
    kind = TemplateKind.parse(template)
    return config.FIRST_PAGE_BUDGETS[kind.value], config.CONTINUATION_BUDGET


def paginate(body: str, first_page_budget: int, continuation_budget: int) -> List[str]:
    """
    Split ``body`` into page bodies by character count.

    The first page takes ``first_page_budget`` characters and every following
    page takes ``continuation_budget``. Cuts ignore word boundaries, so a page
    may end mid-word; this is a budget heuristic, not layout measurement.
    ``"".join(pages) == body`` always holds, and an empty body still yields one
    (blank) page.
    """
    if first_page_budget <= 0 or continuation_budget <= 0:
        raise ValueError("Page budgets must be positive")
    if not body:
        return [""]

    pages = [body[:first_page_budget]]
    for start in range(first_page_budget, len(body), continuation_budget):
        pages.append(body[start : start + continuation_budget])
    return pages


def paginate_for(body: str, template: TemplateKind) -> List[str]:
    first, rest = page_budgets(template)
    return paginate(body, first, rest)


def expected_page_count(length: int, first_page_budget: int, continuation_budget: int) -> int:
    overflow = max(0, length - first_page_budget)
    return 1 + -(-overflow // continuation_budget)
