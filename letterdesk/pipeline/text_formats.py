from __future__ import annotations

import base64
import html
from typing import List, Optional

from .. import config
from ..models import Signer
from .render import Page, RenderedDocument


def to_plain_text(body: str, signer: Optional[Signer] = None) -> str:
    if signer is None:
        return body
    return f"{body}\n\n{signer.name}\n{signer.title}"


def rtf_escape(text: str) -> str:
    """
    Escape text for an RTF body.

    Backslash goes first so the braces' escapes are not escaped again.
    Non-ASCII characters become ``\\uN?`` with N as a signed 16-bit value;
    characters outside the BMP are written as a surrogate pair.
    """
    text = text.replace("\\", "\\\\").replace("{", "\\{").replace("}", "\\}")
    out: List[str] = []
    for ch in text:
        code = ord(ch)
        if code < 0x80:
            out.append(ch)
            continue
        if code > 0xFFFF:
            code -= 0x10000
            units = [0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)]
        else:
            units = [code]
        for unit in units:
            signed = unit - 0x10000 if unit > 0x7FFF else unit
            out.append(f"\\u{signed}?")
    return "".join(out)


def _rtf_paragraphs(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return "\\par\n".join(rtf_escape(line) for line in text.split("\n"))


def to_rtf(body: str, signer: Optional[Signer] = None) -> bytes:
    size = int(round(config.FONT_SIZE * 2))
    parts = [
        "{\\rtf1\\ansi\\deff0",
        "{\\fonttbl{\\f0\\froman Times New Roman;}}",
        f"\\f0\\fs{size} ",
        _rtf_paragraphs(body),
    ]
    if signer is not None:
        parts.append("\\par\n\\par\n")
        parts.append("{\\b " + rtf_escape(signer.name) + "}")
        parts.append("\\par\n")
        parts.append(rtf_escape(signer.title))
    parts.append("}")
    return "".join(parts).encode("ascii")


BASE_STYLE = """
*{margin:0;padding:0;box-sizing:border-box;}
body{background:#ffffff;}
.letter-page{width:100%;max-width:1242px;aspect-ratio:1242 / 1755;position:relative;
  font-family:Georgia, serif;font-size:13px;background:#ffffff;margin:0 auto;page-break-after:always;}
.letter-page.letterhead{background-size:100% 100%;background-repeat:no-repeat;}
.letter-content{position:absolute;display:flex;flex-direction:column;overflow:hidden;}
.letter-body{white-space:pre-wrap;line-height:1.75;color:#1a1a1a;flex:1;overflow:hidden;}
.signer{margin-top:4%;flex-shrink:0;}
.signer-name{font-weight:700;color:#111;}
.signer-title{color:#555;font-size:0.9em;}
@media print{@page{margin:0;}}
""".strip()


def _image_data_uri(page: Page) -> str:
    data = page.background.read_bytes()
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def _page_markup(page: Page) -> str:
    classes = "letter-page letterhead" if page.background is not None else "letter-page"
    style = ""
    if page.background is not None:
        style = f' style="background-image:url({_image_data_uri(page)})"'
    frame = page.frame
    content_style = (
        f"top:{frame.top:g}%;bottom:{frame.bottom:g}%;left:{frame.left:g}%;right:{frame.right:g}%"
    )
    pieces = [
        f'<div class="{classes}" data-page="{page.index + 1}"{style}>',
        f'<div class="letter-content" style="{content_style}">',
        f'<div class="letter-body">{html.escape(page.body)}</div>',
    ]
    if page.is_last and page.signer is not None:
        pieces.append(
            '<div class="signer">'
            f'<div class="signer-name">{html.escape(page.signer.name)}</div>'
            f'<div class="signer-title">{html.escape(page.signer.title)}</div>'
            "</div>"
        )
    pieces.append("</div></div>")
    return "".join(pieces)


def layout_markup(document: RenderedDocument) -> str:
    return "\n".join(_page_markup(page) for page in document.pages)


def to_html(document: RenderedDocument) -> bytes:
    title = f"{document.template.value} Letter"
    return (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset='utf-8'>"
        f"<title>{html.escape(title)}</title>"
        f"<style>{BASE_STYLE}</style>"
        "</head><body>\n"
        f"{layout_markup(document)}\n"
        "</body></html>\n"
    ).encode("utf-8")


def to_word_markup(document: RenderedDocument) -> bytes:
    return (
        "<!DOCTYPE html>\n"
        "<html xmlns:o='urn:schemas-microsoft-com:office:office' "
        "xmlns:w='urn:schemas-microsoft-com:office:word' "
        "xmlns='http://www.w3.org/TR/REC-html40'>"
        "<head><meta charset='utf-8'></head><body>\n"
        f"{layout_markup(document)}\n"
        "</body></html>\n"
    ).encode("utf-8")
