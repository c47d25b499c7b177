import os
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

# Nạp .env cùng thư mục dự án
load_dotenv(dotenv_path=BASE_DIR / ".env")

LANGUAGE = os.getenv("MATHCHAIN_LANGUAGE", "en")
PDF_FONT_PATH = os.getenv("MATHCHAIN_PDF_FONT", "")
LOG_LEVEL = os.getenv("MATHCHAIN_LOG_LEVEL", "INFO")


def configure_logging(level: Optional[str] = None) -> None:
    """For scripts embedding the generator; the library itself never configures logging."""
    lvl = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    # basicConfig bỏ qua nếu root đã có handler
    logging.getLogger().setLevel(lvl)
