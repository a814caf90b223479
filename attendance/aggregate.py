from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .extract import AttendeeRecord


@dataclass
class AttendanceEntry:
    display_name: str
    email: str = ""
    days_present: int = 1


class AttendanceAggregate:
    """
    identity_key -> AttendanceEntry для одного пакета файлов.
    Порядок ключей - порядок первого появления человека.
    Создаётся на каждый пакет и никуда не сохраняется.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, AttendanceEntry] = {}

    def upsert(self, rec: AttendeeRecord) -> AttendanceEntry:
        entry = self._entries.get(rec.identity_key)
        if entry is None:
            # имя/email берём из первой встреченной строки
            entry = AttendanceEntry(display_name=rec.display_name, email=rec.email, days_present=1)
            self._entries[rec.identity_key] = entry
        else:
            entry.days_present += 1
        return entry

    def get(self, key: str) -> Optional[AttendanceEntry]:
        return self._entries.get(key)

    def days_present(self, key: str) -> int:
        entry = self._entries.get(key)
        return entry.days_present if entry else 0

    def items(self) -> Iterator[Tuple[str, AttendanceEntry]]:
        return iter(self._entries.items())

    def as_counts(self) -> Dict[str, int]:
        return {k: e.days_present for k, e in self._entries.items()}

    def to_rows(self) -> List[Dict[str, Any]]:
        return [
            {
                "identity_key": k,
                "name": e.display_name,
                "email": e.email,
                "days_present": e.days_present,
            }
            for k, e in self._entries.items()
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


def tally_file(
    records: Iterable[AttendeeRecord],
    aggregate: AttendanceAggregate,
    source: str = "",
) -> Tuple[int, List[Dict[str, Any]]]:
    """
    Складывает записи одного файла в агрегат: не больше одного +1 на человека за файл.
    Возвращает:
      - counted: сколько людей засчитано в этом файле
      - duplicates_log: повторные строки того же человека (пропущены)
    """
    seen: Set[str] = set()  # уже засчитанные в этом файле identity_key
    duplicates: List[Dict[str, Any]] = []
    counted = 0

    for rec in records:
        if rec.identity_key in seen:
            duplicates.append({
                "reason": "duplicate_in_file",
                "source": source,
                "identity_key": rec.identity_key,
                "name": rec.display_name,
                "role": rec.role,
            })
            continue

        seen.add(rec.identity_key)
        aggregate.upsert(rec)
        counted += 1

    return counted, duplicates
