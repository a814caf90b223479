import pytest

from attendance.extract import (
    REJECT_EMPTY_EMAIL,
    REJECT_EMPTY_NAME,
    REJECT_ROLE,
    REJECT_UNVERIFIED,
    AttendeeRecord,
    clean_display_name,
    evaluate_row,
    extract_record,
    resolve_columns,
)
from attendance.schema import get_variant, qualifying_roles

from conftest import teams_row


@pytest.mark.parametrize("raw, expected", [
    ("Carol (Guest)", "Carol"),
    ("  Bob  Smith  ", "Bob Smith"),
    ("Dan (Unverified) (Guest)", "Dan"),
    ("(Guest)", ""),
    ("", ""),
])
def test_clean_display_name(raw, expected):
    assert clean_display_name(raw) == expected


def test_qualifying_roles_per_variant():
    assert qualifying_roles(get_variant("presenters")) == {"presenter", "organizer"}
    assert qualifying_roles(get_variant("presenters_by_email")) == {"presenter", "organizer"}
    assert qualifying_roles(get_variant("attendees")) == {"attendee"}


def test_name_keyed_record():
    rec = extract_record(teams_row("Alice (Guest)", " Organizer "), get_variant("presenters"))
    assert rec == AttendeeRecord(display_name="Alice", identity_key="Alice", role="organizer", email="")


def test_email_keyed_record():
    rec = extract_record(teams_row("Carol (Guest)", "Organizer", "Carol@X.com "), get_variant("presenters_by_email"))
    assert rec is not None
    assert rec.display_name == "Carol"
    assert rec.identity_key == "carol@x.com"


def test_unverified_rejected_only_in_email_variant():
    row = teams_row("Dan (Unverified)", "Presenter", "dan@x.com")
    assert extract_record(row, get_variant("presenters_by_email")) is None
    # вариант по имени пометку не проверяет
    assert extract_record(row, get_variant("presenters")).identity_key == "Dan"


@pytest.mark.parametrize("role", ["Attendee", "", "presenters", "co-organizer"])
def test_non_qualifying_roles_never_produce_records(role):
    for key in ("presenters", "presenters_by_email"):
        assert extract_record(teams_row("Alice", role, "a@x.com"), get_variant(key)) is None


def test_rejection_reasons():
    variant = get_variant("presenters_by_email")
    cols = resolve_columns(variant)
    assert evaluate_row(teams_row("Alice", "Attendee", "a@x.com"), variant, cols) == (None, REJECT_ROLE)
    assert evaluate_row(teams_row(" (Guest)", "Presenter", "a@x.com"), variant, cols) == (None, REJECT_EMPTY_NAME)
    assert evaluate_row(teams_row("Alice", "Presenter", ""), variant, cols) == (None, REJECT_EMPTY_EMAIL)
    assert evaluate_row(teams_row("Eve (unverified)", "Presenter", "e@x.com"), variant, cols) == (None, REJECT_UNVERIFIED)


def test_short_row_reads_missing_columns_as_empty():
    assert extract_record(["Alice"], get_variant("presenters")) is None


def test_named_columns_use_header():
    variant = get_variant("attendees")
    header = ["Full Name", "Role", "Name"]
    assert resolve_columns(variant, header).name == 2
    assert resolve_columns(variant, header).role == 1

    rec = extract_record(["ignored", "Attendee", "Frank (External)"], variant, header)
    assert rec is not None
    assert rec.identity_key == "Frank"
    assert extract_record(["x", "Presenter", "Frank"], variant, header) is None
