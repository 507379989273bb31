from __future__ import annotations

import pytest

from letterdesk.models import Signer, TemplateKind
from letterdesk.pipeline.render import LetterState, derive_view


SIGNER = Signer(id=7, name="Lindsay Burden", title="Chief Clinical Operations Officer")


def _body_for_pages(count: int) -> str:
    # HRT: 1600 on the first page, 2100 on each page after
    return "w" * (1600 + 2100 * (count - 1))


@pytest.mark.parametrize("count", [1, 2, 5])
def test_signer_only_on_last_page(count: int) -> None:
    view = derive_view(LetterState(body=_body_for_pages(count), signer=SIGNER))
    assert view.page_count == count
    for page in view.pages[:-1]:
        assert page.signer is None
        assert not page.is_last
    assert view.pages[-1].is_last
    assert view.pages[-1].signer is SIGNER


def test_first_page_uses_letterhead_frame() -> None:
    hrt = derive_view(LetterState(body="a" * 2000, template=TemplateKind.HRT))
    trt = derive_view(LetterState(body="a" * 2000, template=TemplateKind.TRT))

    assert hrt.pages[0].is_first
    assert hrt.pages[0].background is not None
    assert hrt.pages[0].background.name == "hrt_letterhead.png"
    assert hrt.pages[0].frame.top == 22.0
    assert trt.pages[0].frame.top == 14.5
    assert hrt.pages[0].frame.bottom == pytest.approx(10.1)

    second = hrt.pages[1]
    assert not second.is_first
    assert second.background is None
    assert (second.frame.top, second.frame.bottom) == (4.0, 8.0)


def test_empty_body_renders_blank_first_page() -> None:
    view = derive_view(LetterState(signer=SIGNER))
    assert view.page_count == 1
    page = view.pages[0]
    assert page.body == ""
    assert page.is_first and page.is_last
    assert page.signer is SIGNER


def test_multi_page_scenario() -> None:
    view = derive_view(LetterState(body="b" * 3500, template=TemplateKind.HRT))
    assert [len(p.body) for p in view.pages] == [1600, 1900]
    assert view.is_multi_page
    assert view.approaching_limit is False
    assert view.body == "b" * 3500


def test_approaching_limit_on_single_page() -> None:
    view = derive_view(LetterState(body="c" * 1450, template=TemplateKind.HRT))
    assert view.page_count == 1
    assert view.approaching_limit is True

    calm = derive_view(LetterState(body="c" * 1440, template=TemplateKind.HRT))
    assert calm.approaching_limit is False


def test_long_document_flag() -> None:
    assert derive_view(LetterState(body=_body_for_pages(10))).long_document is False
    assert derive_view(LetterState(body=_body_for_pages(11))).long_document is True
