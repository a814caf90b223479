from __future__ import annotations
import codecs
from typing import List, Sequence

import pytest

from attendance.schema import PipelineConfig, get_variant

TEAMS_HEADER = ["Name", "First Join", "Last Leave", "In-Meeting Duration", "Email", "Participant ID (UPN)", "Role"]

PREAMBLE = [
    ["1. Summary"],
    ["Meeting title", "Weekly sync"],
    ["Attended participants", "3"],
    ["Start time", "1/8/25, 9:58:01 AM"],
    [],
    ["2. Participants"],
]


def teams_row(name: str, role: str, email: str = "") -> List[str]:
    return [name, "1/8/25, 9:58:01 AM", "1/8/25, 11:02:13 AM", "1h 4m", email, email, role]


def build_export(
    rows: Sequence[Sequence[str]],
    *,
    header: Sequence[str] | None = TEAMS_HEADER,
    preamble: Sequence[Sequence[str]] = PREAMBLE,
    encoding: str = "utf-16le",
    bom: bool = True,
    delimiter: str = "\t",
) -> bytes:
    lines = [list(r) for r in preamble]
    if header is not None:
        lines.append(list(header))
    lines += [list(r) for r in rows]
    text = "\r\n".join(delimiter.join(r) for r in lines) + "\r\n"
    data = text.encode(encoding)
    if bom and encoding == "utf-16le":
        data = codecs.BOM_UTF16_LE + data
    return data


class FakeUpload:
    # как streamlit UploadedFile: .name и .getvalue()
    def __init__(self, name: str, data: bytes):
        self.name = name
        self._data = data

    def getvalue(self) -> bytes:
        return self._data


@pytest.fixture
def make_export():
    return build_export


@pytest.fixture
def row():
    return teams_row


@pytest.fixture
def presenters_config() -> PipelineConfig:
    return PipelineConfig(variant=get_variant("presenters"))


@pytest.fixture
def email_config() -> PipelineConfig:
    return PipelineConfig(variant=get_variant("presenters_by_email"))


@pytest.fixture
def upload():
    return FakeUpload
