from __future__ import annotations
from typing import Optional


class AttendanceError(RuntimeError):
    """Базовая ошибка обработки выгрузок посещаемости."""


class DecodingError(AttendanceError):
    # байты не соответствуют заявленной кодировке (или кодировка неизвестна)
    pass


class EmptyBatchError(AttendanceError):
    pass


class SchemaMismatchError(AttendanceError):
    # строка-заголовок (Name/Role) так и не встретилась до конца файла
    pass


class BatchError(AttendanceError):
    """
    Пакет прерван из-за одного файла.
    Хранит имя файла и исходную причину, частичный результат не возвращается.
    """

    def __init__(self, source_name: str, cause: Exception):
        self.source_name = source_name
        self.cause = cause
        super().__init__(f"{source_name}: {self.kind}: {cause}")

    @property
    def kind(self) -> str:
        return type(self.cause).__name__


def describe_error(e: Exception, source_name: Optional[str] = None) -> str:
    # Текст для пользователя: файл + тип ошибки + подробности
    if isinstance(e, BatchError):
        return str(e)
    if source_name:
        return f"{source_name}: {type(e).__name__}: {e}"
    return f"{type(e).__name__}: {e}"
