from __future__ import annotations
import codecs
import logging
import re
from typing import BinaryIO, Iterator

from .errors import DecodingError
from .ingest import sniff_encoding

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

_LINE_RE = re.compile(r"\r\n|\r|\n")


def resolve_encoding(encoding: str, head: bytes) -> str:
    enc = (encoding or "").strip().lower()
    if enc in ("", "auto"):
        return sniff_encoding(head)
    try:
        codecs.lookup(enc)
    except LookupError as e:
        raise DecodingError(f"Неизвестная кодировка: {encoding!r}") from e
    return enc


def iter_decoded_lines(
    stream: BinaryIO,
    encoding: str = "utf-16le",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[str]:
    """
    Лениво читает бинарный поток и отдаёт строки текста без переводов строк.
    - encoding: имя кодировки Python или "auto" (по BOM, иначе utf-8)
    - ведущий BOM отбрасывается (Teams пишет UTF-16LE с BOM)
    - \\r\\n, \\n и \\r считаются концом строки, в т.ч. \\r\\n на границе чанков
    Некорректные для кодировки байты (включая обрезанный последний символ) -> DecodingError.
    """
    chunk = stream.read(chunk_size)
    enc = resolve_encoding(encoding, chunk)
    decoder = codecs.getincrementaldecoder(enc)(errors="strict")
    log.debug("decoding stream as %s", enc)

    offset = 0
    pending = ""
    bom_checked = False

    while True:
        final = not chunk
        try:
            text = decoder.decode(chunk, final=final)
        except UnicodeDecodeError as e:
            raise DecodingError(
                f"Байты не соответствуют кодировке {enc} (около байта {offset + e.start}): {e.reason}"
            ) from e
        offset += len(chunk)

        if not bom_checked and text:
            if text.startswith("\ufeff"):
                text = text[1:]
            bom_checked = True

        pending += text

        # одинокий \r в конце может оказаться половиной \r\n из следующего чанка
        tail = ""
        if not final and pending.endswith("\r"):
            pending, tail = pending[:-1], "\r"

        lines = _LINE_RE.split(pending)
        pending = lines.pop() + tail
        yield from lines

        if final:
            if pending:
                yield pending
            return

        chunk = stream.read(chunk_size)
