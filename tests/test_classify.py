from attendance.classify import SectionClassifier, SectionState, is_header_row
from attendance.schema import get_variant

from conftest import TEAMS_HEADER, teams_row


def test_preamble_and_header_are_not_data():
    clf = SectionClassifier(get_variant("presenters"))
    assert clf.state is SectionState.SEEKING_HEADER

    assert clf.observe(["Preamble"]) is False
    assert clf.observe(teams_row("Eve", "Presenter")) is False
    assert clf.observe(TEAMS_HEADER) is False
    assert clf.state is SectionState.IN_DATA
    assert clf.header == TEAMS_HEADER
    assert clf.header_row == 3

    assert clf.observe(teams_row("Alice", "Presenter")) is True


def test_header_match_is_case_insensitive_substring():
    variant = get_variant("presenters")
    header = ["FULL NAME", "", "", "", "", "", "user role"]
    assert is_header_row(header, variant)


def test_header_tokens_must_be_in_configured_columns():
    variant = get_variant("presenters")
    # Role не в 7-й колонке
    assert not is_header_row(["Name", "Role"], variant)
    assert not is_header_row(["Role", "", "", "", "", "", "Name"], variant)


def test_named_variant_finds_tokens_anywhere():
    variant = get_variant("attendees")
    assert is_header_row(["Role", "Email", "Name"], variant)
    assert not is_header_row(["Email", "Name"], variant)


def test_no_terminal_state():
    clf = SectionClassifier(get_variant("presenters"))
    clf.observe(TEAMS_HEADER)
    # повторный заголовок после начала данных - уже просто строка данных
    assert clf.observe(TEAMS_HEADER) is True
    assert clf.observe(["3. In-Meeting Activities"]) is True
    assert clf.in_data_section and clf.header_seen


def test_header_never_seen():
    clf = SectionClassifier(get_variant("presenters"))
    for r in (["a"], ["b", "c"], teams_row("Alice", "Presenter")):
        assert clf.observe(r) is False
    assert not clf.header_seen
    assert clf.rows_seen == 3
