from __future__ import annotations
import enum
import logging
from typing import List, Optional, Sequence

from .schema import SchemaVariant
from .utils import norm_text

log = logging.getLogger(__name__)


class SectionState(enum.Enum):
    SEEKING_HEADER = "seeking_header"
    IN_DATA = "in_data"


def _cell(row: Sequence[str], idx: Optional[int]) -> str:
    if idx is None or idx < 0 or idx >= len(row):
        return ""
    return row[idx] or ""


def _contains(value: str, token: str) -> bool:
    return bool(token) and norm_text(token) in norm_text(value)


def is_header_row(row: Sequence[str], variant: SchemaVariant) -> bool:
    """
    Строка-заголовок таблицы участников.
    Позиционный вариант: токены должны стоять в колонках имени и роли.
    Вариант с именованными колонками: токены в любых колонках.
    Сравнение - подстрока без учёта регистра ("Name" матчит "Full Name").
    """
    name_tok = variant.header_name_token
    role_tok = variant.header_role_token
    if variant.named_columns:
        return any(_contains(c, name_tok) for c in row) and any(_contains(c, role_tok) for c in row)
    return _contains(_cell(row, variant.name_col), name_tok) and _contains(_cell(row, variant.role_col), role_tok)


class SectionClassifier:
    """
    Автомат из двух состояний: SEEKING_HEADER -> IN_DATA.
    Преамбула выгрузки (метаданные встречи) пропускается, пока не встретится
    заголовок таблицы участников; сам заголовок тоже не данные.
    Конечного состояния нет - данные идут до конца файла.
    Экземпляр принадлежит одному проходу по одному файлу.
    """

    def __init__(self, variant: SchemaVariant):
        self.variant = variant
        self.state = SectionState.SEEKING_HEADER
        self.header: Optional[List[str]] = None
        self.rows_seen = 0
        self.header_row: Optional[int] = None

    @property
    def header_seen(self) -> bool:
        return self.header is not None

    @property
    def in_data_section(self) -> bool:
        return self.state is SectionState.IN_DATA

    def observe(self, row: Sequence[str]) -> bool:
        # True - строка с данными; False - преамбула или заголовок
        self.rows_seen += 1
        if self.state is SectionState.IN_DATA:
            return True

        if is_header_row(row, self.variant):
            self.state = SectionState.IN_DATA
            self.header = list(row)
            self.header_row = self.rows_seen
            log.debug("participants header found at row %d: %s", self.rows_seen, self.header)
        return False
