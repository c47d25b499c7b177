from typing import Optional

import settings

OPERATION_NAMES = {
    "vi": {"add": "Phép cộng", "subtract": "Phép trừ", "multiply": "Phép nhân", "divide": "Phép chia"},
    "en": {"add": "Addition", "subtract": "Subtraction", "multiply": "Multiplication", "divide": "Division"},
}

TITLES = {
    "vi": {"questions": "BÀI TẬP TOÁN - CÂU HỎI", "answers": "BÀI TẬP TOÁN - ĐÁP ÁN", "chain": "Chuỗi"},
    "en": {"questions": "MATH CHAINS - QUESTIONS", "answers": "MATH CHAINS - ANSWERS", "chain": "Chain"},
}

# dấu phân cách hàng nghìn
_GROUP_SEP = {"vi": ".", "en": ","}


def _lang(language: Optional[str]) -> str:
    lang = language or settings.LANGUAGE
    return lang if lang in _GROUP_SEP else "en"


def format_number(n: int, language: Optional[str] = None) -> str:
    grouped = f"{n:,}"
    return grouped.replace(",", _GROUP_SEP[_lang(language)])


def operation_name(op: str, language: Optional[str] = None) -> str:
    return OPERATION_NAMES[_lang(language)][op]


def title(key: str, language: Optional[str] = None) -> str:
    return TITLES[_lang(language)][key]
