from __future__ import annotations
import csv
import logging
from typing import Iterable, Iterator, List, Optional

log = logging.getLogger(__name__)


def _reader_kwargs(delimiter: str, quote: Optional[str], trim: bool) -> dict:
    if not delimiter or len(delimiter) != 1:
        raise ValueError(f"Разделитель должен быть одним символом, получено {delimiter!r}")
    kw = {
        "delimiter": delimiter,
        "skipinitialspace": trim,
        # strict=False: незакрытая кавычка забирает остаток строки в поле, без ошибки
        "strict": False,
    }
    if quote:
        if len(quote) != 1:
            raise ValueError(f"Символ кавычки должен быть одним символом, получено {quote!r}")
        if quote == delimiter:
            raise ValueError(f"Символ кавычки совпадает с разделителем: {quote!r}")
        kw["quotechar"] = quote
        kw["doublequote"] = True
    else:
        kw["quoting"] = csv.QUOTE_NONE
    return kw


def check_dialect(delimiter: str, quote: Optional[str] = '"') -> None:
    # ошибки настройки ловим до чтения первого файла
    _reader_kwargs(delimiter, quote, True)


def tokenize_line(line: str, delimiter: str = "\t", quote: Optional[str] = '"', trim: bool = True) -> List[str]:
    """
    Делит одну декодированную строку на поля.
    - поле в кавычках может содержать разделитель
    - удвоенная кавычка внутри поля в кавычках - литеральная кавычка
    - пустая строка -> [] (вызывающий код её пропускает)
    """
    if not line or not line.strip():
        return []

    kw = _reader_kwargs(delimiter, quote, trim)
    try:
        fields = next(csv.reader([line], **kw), [])
    except csv.Error as e:
        # одна плохая строка не должна ронять весь файл
        log.debug("csv could not parse line, splitting plainly: %s", e)
        fields = line.split(delimiter)

    if trim:
        fields = [f.strip() for f in fields]
    return fields


def iter_rows(
    lines: Iterable[str],
    delimiter: str = "\t",
    quote: Optional[str] = '"',
    trim: bool = True,
) -> Iterator[List[str]]:
    # Пропускает пустые строки и строки, где все поля пустые (одни разделители)
    for line in lines:
        row = tokenize_line(line, delimiter=delimiter, quote=quote, trim=trim)
        if not row or not any(f.strip() for f in row):
            continue
        yield row
