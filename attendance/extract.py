from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence, Tuple

from .schema import IDENTITY_EMAIL, SchemaVariant
from .utils import clean_cell, norm_text

UNVERIFIED_MARK = "unverified"

# причины отбраковки строки
REJECT_ROLE = "role_not_qualifying"
REJECT_EMPTY_NAME = "empty_name"
REJECT_EMPTY_EMAIL = "empty_email"
REJECT_UNVERIFIED = "unverified"


@dataclass(frozen=True)
class AttendeeRecord:
    display_name: str
    identity_key: str
    role: str
    email: str = ""


class Columns(NamedTuple):
    name: Optional[int]
    role: Optional[int]
    email: Optional[int]


def clean_display_name(raw: str) -> str:
    # "Carol (Guest)" -> "Carol": всё начиная с первой скобки - пометка Teams
    return clean_cell(str(raw or "").split("(")[0])


def _find_header_col(header: Sequence[str], title: str) -> Optional[int]:
    want = norm_text(title)
    if not want:
        return None
    cols = [norm_text(h) for h in header]
    # точное совпадение важнее подстроки ("Name" vs "First Name")
    for i, c in enumerate(cols):
        if c == want:
            return i
    for i, c in enumerate(cols):
        if want in c:
            return i
    return None


def resolve_columns(variant: SchemaVariant, header: Optional[Sequence[str]] = None) -> Columns:
    if not variant.named_columns or header is None:
        return Columns(variant.name_col, variant.role_col, variant.email_col)
    email = _find_header_col(header, variant.email_header) if (variant.identity == IDENTITY_EMAIL or variant.require_email) else None
    return Columns(
        _find_header_col(header, variant.name_header),
        _find_header_col(header, variant.role_header),
        email,
    )


def _get(row: Sequence[str], idx: Optional[int]) -> str:
    if idx is None or idx < 0 or idx >= len(row):
        return ""
    return row[idx] or ""


def evaluate_row(
    row: Sequence[str],
    variant: SchemaVariant,
    columns: Columns,
) -> Tuple[Optional[AttendeeRecord], str]:
    """
    Возвращает (запись, "") или (None, причина отбраковки).
    Порядок проверок: роль -> имя -> email -> пометка unverified.
    """
    raw_name = _get(row, columns.name)
    role = norm_text(_get(row, columns.role))

    if role not in variant.qualifying_roles:
        return None, REJECT_ROLE

    display_name = clean_display_name(raw_name)
    if not display_name:
        return None, REJECT_EMPTY_NAME

    email = norm_text(_get(row, columns.email)) if columns.email is not None else ""
    if variant.require_email and not email:
        return None, REJECT_EMPTY_EMAIL

    # пометка стоит в скобках, поэтому смотрим на исходное имя
    if variant.reject_unverified and UNVERIFIED_MARK in norm_text(raw_name):
        return None, REJECT_UNVERIFIED

    if variant.identity == IDENTITY_EMAIL:
        if not email:
            return None, REJECT_EMPTY_EMAIL
        key = email
    else:
        key = display_name

    return AttendeeRecord(display_name=display_name, identity_key=key, role=role, email=email), ""


def extract_record(
    row: Sequence[str],
    variant: SchemaVariant,
    header: Optional[Sequence[str]] = None,
) -> Optional[AttendeeRecord]:
    rec, _ = evaluate_row(row, variant, resolve_columns(variant, header))
    return rec
