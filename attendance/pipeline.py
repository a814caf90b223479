from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterable, Iterator, List, Tuple

from .aggregate import AttendanceAggregate, tally_file
from .classify import SectionClassifier
from .decode import iter_decoded_lines
from .errors import AttendanceError, BatchError, EmptyBatchError, SchemaMismatchError
from .extract import AttendeeRecord, evaluate_row, resolve_columns
from .ingest import guess_delimiter, open_upload, upload_name
from .schema import PipelineConfig
from .tokenizer import check_dialect, iter_rows

log = logging.getLogger(__name__)

SNIFF_LINES = 20


@dataclass
class FileReport:
    source: str
    rows_read: int = 0
    header_found: bool = False
    header_row: int | None = None
    accepted: int = 0
    counted: int = 0
    rejected: Dict[str, int] = field(default_factory=dict)
    duplicates: List[Dict[str, Any]] = field(default_factory=list)
    delimiter: str = ""

    def as_row(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "rows_read": self.rows_read,
            "header_found": self.header_found,
            "header_row": self.header_row or "",
            "accepted": self.accepted,
            "counted": self.counted,
            "duplicates": len(self.duplicates),
            "rejected": sum(self.rejected.values()),
        }


@dataclass
class BatchResult:
    aggregate: AttendanceAggregate
    reports: List[FileReport]

    @property
    def duplicates(self) -> List[Dict[str, Any]]:
        return [d for r in self.reports for d in r.duplicates]

    @property
    def files_without_header(self) -> List[str]:
        return [r.source for r in self.reports if not r.header_found]


def _resolve_delimiter(lines: Iterator[str], delimiter: str) -> Tuple[str, Iterator[str]]:
    if delimiter != "auto":
        return delimiter, lines
    # подглядываем первые строки и возвращаем их обратно в поток
    head = list(itertools.islice(lines, SNIFF_LINES))
    return guess_delimiter("\n".join(head)), itertools.chain(head, lines)


def process_file(
    stream: BinaryIO,
    source_name: str,
    config: PipelineConfig,
    aggregate: AttendanceAggregate,
) -> FileReport:
    """
    Один проход по одному файлу: декодирование -> токенизация -> поиск секции
    участников -> извлечение записей -> дедуп внутри файла -> агрегат.
    DecodingError пробрасывается; отсутствие заголовка - предупреждение
    (или SchemaMismatchError при config.strict_header).
    """
    variant = config.variant
    report = FileReport(source=source_name)
    classifier = SectionClassifier(variant)

    lines = iter_decoded_lines(stream, config.encoding)
    delimiter, lines = _resolve_delimiter(lines, config.delimiter)
    report.delimiter = delimiter

    def _records() -> Iterator[AttendeeRecord]:
        columns = None
        for row in iter_rows(lines, delimiter=delimiter, quote=config.quote, trim=config.trim):
            report.rows_read += 1
            if not classifier.observe(row):
                continue
            if columns is None:
                columns = resolve_columns(variant, classifier.header)
            rec, reason = evaluate_row(row, variant, columns)
            if rec is None:
                report.rejected[reason] = report.rejected.get(reason, 0) + 1
                log.debug("%s: row %d rejected (%s)", source_name, report.rows_read, reason)
                continue
            report.accepted += 1
            yield rec

    report.counted, report.duplicates = tally_file(_records(), aggregate, source=source_name)
    report.header_found = classifier.header_seen
    report.header_row = classifier.header_row

    if not report.header_found:
        msg = (
            f"строка-заголовок ({variant.header_name_token}/{variant.header_role_token}) "
            f"не найдена, прочитано строк: {report.rows_read}"
        )
        if config.strict_header:
            raise SchemaMismatchError(msg)
        log.warning("%s: %s; file yields no records", source_name, msg)

    log.info(
        "%s: rows=%d accepted=%d counted=%d duplicates=%d rejected=%d",
        source_name,
        report.rows_read,
        report.accepted,
        report.counted,
        len(report.duplicates),
        sum(report.rejected.values()),
    )
    return report


def process_batch(files: Iterable[Any], config: PipelineConfig) -> BatchResult:
    """
    Обрабатывает пакет файлов строго последовательно в один общий агрегат.
    files: UploadedFile Streamlit или пары (name, bytes|поток).
    Всё-или-ничего: ошибка в любом файле -> BatchError с именем файла,
    частичный агрегат не возвращается.
    """
    uploads = list(files or [])
    if not uploads:
        raise EmptyBatchError("Не передано ни одного файла")
    if config.delimiter != "auto":
        check_dialect(config.delimiter, config.quote)

    aggregate = AttendanceAggregate()
    reports: List[FileReport] = []

    for up in uploads:
        source_name = upload_name(up)
        log.info("processing file: %s (variant=%s, encoding=%s)", source_name, config.variant.key, config.encoding)
        try:
            stream = open_upload(up)
        except TypeError as e:
            log.error("batch aborted on %s: unsupported upload: %s", source_name, e)
            raise BatchError(source_name, e) from e
        try:
            reports.append(process_file(stream, source_name, config, aggregate))
        except (AttendanceError, OSError) as e:
            log.error("batch aborted on %s: %s: %s", source_name, type(e).__name__, e)
            raise BatchError(source_name, e) from e

    log.info("batch done: files=%d people=%d", len(reports), len(aggregate))
    return BatchResult(aggregate=aggregate, reports=reports)
