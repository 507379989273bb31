from __future__ import annotations

from pathlib import Path
from typing import Dict


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "letterdesk.db"
ASSET_DIR = BASE_DIR / "assets" / "letterheads"

TEMPLATE_KINDS = ("HRT", "TRT")

# chars that comfortably fit per page at ~11.5pt serif with the frames below
FIRST_PAGE_BUDGETS: Dict[str, int] = {
    "HRT": 1600,
    "TRT": 1800,
}
CONTINUATION_BUDGET = 2100

APPROACHING_LIMIT_RATIO = 0.9
LONG_DOCUMENT_PAGES = 10

# page frames as percentage insets (top, bottom, left, right)
HEADER_END_PCT: Dict[str, float] = {
    "HRT": 22.0,
    "TRT": 14.5,
}
FOOTER_START_PCT = 89.9
SIDE_INSETS_PCT = (9.0, 8.0)
CONTINUATION_INSETS_PCT = (4.0, 8.0)

# layout pages are drawn at half the template resolution; 2x gives 1242x1755 px
TEMPLATE_ASPECT = (1242, 1755)
LAYOUT_PAGE_SIZE = (TEMPLATE_ASPECT[0] / 2.0, TEMPLATE_ASPECT[1] / 2.0)
PDF_SUPERSAMPLE = 2.0

FONT_NAME = "Times-Roman"
FONT_BOLD = "Times-Bold"
FONT_SIZE = 11.5
LINE_HEIGHT = 1.75
TEXT_COLOR = "#1A1A1A"
SIGNER_NAME_COLOR = "#111111"
SIGNER_TITLE_COLOR = "#555555"

DRAFT_DEBOUNCE_SECONDS = 0.6
STATUS_TTL_SECONDS = 3.0

ZOOM_MIN = 0.6
ZOOM_MAX = 1.5
ZOOM_DEFAULT = 1.0

DRAFT_KEY = "letter_draft"
DARK_MODE_KEY = "dark_mode"
ZOOM_KEY = "preview_zoom"
SIGNERS_SEEDED_KEY = "signers_seeded"

EXPORT_PREFIX = "letter"

DEFAULT_SIGNERS = [
    ("Doron Stember", "Chief Medical Officer"),
    ("Lindsay Burden", "Chief Clinical Operations Officer"),
    ("Brandon Shrair", "CEO"),
]


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "letterdesk.db"


def set_asset_dir(path: Path) -> None:
    global ASSET_DIR
    ASSET_DIR = path
