# pdf.py
import logging
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError
from reportlab.lib.utils import simpleSplit
from pathlib import Path
from typing import Optional

import i18n
import settings
from generator import sum_of_digits
from schema import OPERATION_SYMBOLS, ProblemChain, Worksheet

logger = logging.getLogger(__name__)

BLANK = "____"


def _register_font() -> str:
    here = Path(__file__).resolve().parent
    candidates = [
        Path(settings.PDF_FONT_PATH) if settings.PDF_FONT_PATH else None,
        here / "fonts" / "Roboto-VariableFont_wdth,wght.ttf",  # ưu tiên font nằm trong repo
        here / "fonts" / "DejaVuSans.ttf",
    ]
    for p in candidates:
        if p is not None and p.exists():
            try:
                pdfmetrics.registerFont(TTFont("VN", str(p)))
                return "VN"
            except TTFError as e:
                logger.warning("Font register failed for %s: %s", p, e)
    return "Helvetica"  # fallback (sẽ thiếu dấu tiếng Việt)


FONT_NAME = _register_font()

# Helvetica không có −, → nên dùng ký tự ASCII
if FONT_NAME == "Helvetica":
    SYMBOLS = {**OPERATION_SYMBOLS, "subtract": "-"}
    ARROW = "->"
else:
    SYMBOLS = dict(OPERATION_SYMBOLS)
    ARROW = "→"


def chain_line(chain: ProblemChain, with_answers: bool = False, show_sum_of_digits: bool = False,
               language: Optional[str] = None) -> str:
    parts = [i18n.format_number(chain.starting_number, language)]
    for p in chain.problems:
        step = f"{SYMBOLS[p.operation]}{i18n.format_number(p.operand, language)}"
        if with_answers:
            value = i18n.format_number(p.result, language)
            if show_sum_of_digits:
                value += f" ({sum_of_digits(p.result)})"
        else:
            value = BLANK
        parts.append(f"{step} {ARROW} {value}")
    return "  ".join(parts)


def render_worksheet_pdf(path: str, worksheet: Worksheet, with_answers: bool = False,
                         language: Optional[str] = None, title: Optional[str] = None):
    c = canvas.Canvas(str(path), pagesize=A4)
    W, H = A4
    margin = 15 * mm
    lh = 8 * mm
    x = margin
    y = H - margin

    c.setFont(FONT_NAME, 14)
    c.drawString(x, y, title or i18n.title("answers" if with_answers else "questions", language))
    y -= 1.5 * lh
    c.setFont(FONT_NAME, 11)

    max_width = W - 2 * margin
    label = i18n.title("chain", language)
    show_digits = worksheet.config.show_sum_of_digits

    for i, chain in enumerate(worksheet.chains, start=1):
        line = f"{label} {i}.  " + chain_line(chain, with_answers, show_digits, language)

        for seg in simpleSplit(line, FONT_NAME, 11, max_width):
            if y < margin + lh:
                c.showPage(); y = H - margin; c.setFont(FONT_NAME, 11)
            c.drawString(x, y, seg); y -= lh

        y -= 0.5 * lh

    c.save()
