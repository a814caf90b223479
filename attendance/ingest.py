from __future__ import annotations
import codecs
import csv
from io import BytesIO
from typing import Any, BinaryIO

# =========================

# Кодировка: BOM-сниффинг для режима "auto"
# =========================
_BOMS = [
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16le"),
    (codecs.BOM_UTF16_BE, "utf-16be"),
]


def sniff_encoding(head: bytes, default: str = "utf-8") -> str:
    # Teams отдаёт UTF-16LE с BOM, ручные CSV обычно UTF-8 (иногда с BOM)
    for bom, enc in _BOMS:
        if head.startswith(bom):
            return enc
    return default

# =========================

# Разделитель: csv.Sniffer + подсчёт по строкам
# =========================
DELIMITER_CANDIDATES = ["\t", ",", ";", "|"]


def guess_delimiter(sample_text: str) -> str:
    # выгрузки Teams - табы, CSV из Excel - ',' (en-US) или ';' (ru locales)
    try:
        dialect = csv.Sniffer().sniff(sample_text, delimiters="".join(DELIMITER_CANDIDATES))
        if dialect.delimiter:
            return dialect.delimiter
    except csv.Error:
        pass

    # fallback по количеству в первых строках
    lines = [ln for ln in sample_text.splitlines() if ln.strip()][:20]
    if not lines:
        return "\t"

    scores = {}
    for d in DELIMITER_CANDIDATES:
        # среднее количество разделителей на строку
        cnts = [ln.count(d) for ln in lines]
        scores[d] = sum(cnts) / max(1, len(cnts))

    # выбираем лучший, но если все 0 - пусть будет таб
    best = max(scores.items(), key=lambda x: x[1])[0]
    return best if scores.get(best, 0) > 0 else "\t"

# =========================

# Uploads -> (имя, поток байт)
# =========================
def _as_stream(data: Any) -> BinaryIO:
    if isinstance(data, (bytes, bytearray)):
        return BytesIO(bytes(data))
    if hasattr(data, "read"):
        return data
    raise TypeError(f"Неподдерживаемый источник данных: {type(data).__name__}")


def upload_name(up: Any) -> str:
    # имя нужно раньше потока: по нему называется файл в BatchError
    if isinstance(up, tuple) and up:
        return str(up[0])
    return str(getattr(up, "name", "") or "<без имени>")


def open_upload(up: Any) -> BinaryIO:
    """
    Приводит одну загрузку к бинарному потоку.
    Поддерживает:
      - объекты Streamlit UploadedFile (есть .name и .getvalue())
      - пары (name, bytes) или (name, поток)
    Поток принадлежит обработчику только на время одного прохода по файлу.
    """
    if isinstance(up, tuple):
        if len(up) != 2:
            raise TypeError(f"Ожидалась пара (name, data), получено {len(up)} элементов")
        return _as_stream(up[1])
    if hasattr(up, "getvalue"):
        return BytesIO(up.getvalue())
    raise TypeError(f"Неподдерживаемая загрузка: {type(up).__name__}")
