"""
Этот пакет содержит:
- декодирование выгрузок посещаемости (UTF-16LE/UTF-8, BOM)
- разбор строк с разделителем и кавычками
- поиск секции участников (автомат заголовка)
- извлечение участников по вариантам выгрузки
- дедупликацию внутри файла и подсчёт дней присутствия
- экспорт итогового отчёта
"""
from .errors import AttendanceError, BatchError, DecodingError, EmptyBatchError, SchemaMismatchError
from .schema import PipelineConfig, SchemaVariant, load_config, load_variants, qualifying_roles
from .extract import AttendeeRecord, extract_record
from .aggregate import AttendanceAggregate, tally_file
from .pipeline import process_batch, process_file
from .export import export_to_excel_bytes, summary_frame

__all__ = [
    "AttendanceError",
    "BatchError",
    "DecodingError",
    "EmptyBatchError",
    "SchemaMismatchError",
    "PipelineConfig",
    "SchemaVariant",
    "load_config",
    "load_variants",
    "qualifying_roles",
    "AttendeeRecord",
    "extract_record",
    "AttendanceAggregate",
    "tally_file",
    "process_batch",
    "process_file",
    "export_to_excel_bytes",
    "summary_frame",
]
