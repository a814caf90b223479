from __future__ import annotations
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"
LOG_DIR = BASE_DIR / "logs"

LOGGER_NAME = "attendance"


def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default


def rules_path() -> Path:
    return DEFAULT_DATA_DIR / "rules.json"


def setup_logging(debug: bool = False, log_dir: Path | None = None) -> logging.Logger:
    # Консоль + файл logs/attendance.log; повторный вызов (rerun Streamlit) не дублирует хендлеры
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_dir = log_dir or LOG_DIR
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "attendance.log", encoding="utf-8")
        fh.setLevel(logging.DEBUG if debug else logging.INFO)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    except OSError:
        # каталог только для чтения (например, установленный пакет) - пишем только в консоль
        pass

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(logging.DEBUG if debug else logging.INFO)
    sh.setFormatter(fmt)
    logger.addHandler(sh)
    return logger


_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP варианты


def clean_cell(s: Any) -> str:
    """
    Очистка значения ячейки без смены регистра:
    - BOM/неразрывные пробелы
    - схлопывание пробелов
    """
    if s is None:
        return ""
    s = str(s).replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    return re.sub(r"\s+", " ", s).strip()


def norm_text(s: Any) -> str:
    # clean_cell + lower: для ролей, email и сравнения заголовков
    return clean_cell(s).lower()
