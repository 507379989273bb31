from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .. import config
from ..assets import letterhead_path
from ..models import Signer, TemplateKind
from .paginate import page_budgets, paginate


@dataclass(frozen=True)
class PageFrame:
    """Content box of a page, as percentage insets from each edge."""

    top: float
    bottom: float
    left: float
    right: float


@dataclass(frozen=True)
class Page:
    index: int
    body: str
    is_first: bool
    is_last: bool
    frame: PageFrame
    background: Optional[Path] = None
    signer: Optional[Signer] = None


@dataclass(frozen=True)
class RenderedDocument:
    template: TemplateKind
    pages: List[Page]
    signer: Optional[Signer] = None
    body_length: int = 0
    approaching_limit: bool = False
    long_document: bool = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def is_multi_page(self) -> bool:
        return len(self.pages) > 1

    @property
    def body(self) -> str:
        return "".join(page.body for page in self.pages)


@dataclass(frozen=True)
class LetterState:
    body: str = ""
    template: TemplateKind = TemplateKind.HRT
    signer: Optional[Signer] = field(default=None)


def letterhead_frame(template: TemplateKind) -> PageFrame:
    left, right = config.SIDE_INSETS_PCT
    return PageFrame(
        top=config.HEADER_END_PCT[template.value],
        bottom=100.0 - config.FOOTER_START_PCT,
        left=left,
        right=right,
    )


def continuation_frame() -> PageFrame:
    top, bottom = config.CONTINUATION_INSETS_PCT
    left, right = config.SIDE_INSETS_PCT
    return PageFrame(top=top, bottom=bottom, left=left, right=right)


def derive_view(state: LetterState) -> RenderedDocument:
    template = TemplateKind.parse(state.template)
    first_budget, rest_budget = page_budgets(template)
    bodies = paginate(state.body, first_budget, rest_budget)
    last = len(bodies) - 1

    pages: List[Page] = []
    for index, text in enumerate(bodies):
        is_first = index == 0
        pages.append(
            Page(
                index=index,
                body=text,
                is_first=is_first,
                is_last=index == last,
                frame=letterhead_frame(template) if is_first else continuation_frame(),
                background=letterhead_path(template) if is_first else None,
                signer=state.signer if index == last else None,
            )
        )

    length = len(state.body)
    return RenderedDocument(
        template=template,
        pages=pages,
        signer=state.signer,
        body_length=length,
        approaching_limit=length > first_budget * config.APPROACHING_LIMIT_RATIO and len(pages) == 1,
        long_document=len(pages) > config.LONG_DOCUMENT_PAGES,
    )
