from attendance.aggregate import AttendanceAggregate, tally_file
from attendance.extract import AttendeeRecord


def rec(name, key=None, email=""):
    return AttendeeRecord(display_name=name, identity_key=key or name, role="presenter", email=email)


def test_same_identity_twice_in_one_file_counts_once():
    agg = AttendanceAggregate()
    counted, dups = tally_file([rec("Alice"), rec("Alice")], agg, source="day1.csv")
    assert counted == 1
    assert agg.as_counts() == {"Alice": 1}
    assert len(dups) == 1
    assert dups[0]["source"] == "day1.csv"
    assert dups[0]["reason"] == "duplicate_in_file"


def test_same_identity_in_two_files_counts_twice():
    agg = AttendanceAggregate()
    tally_file([rec("Alice")], agg)
    tally_file([rec("Alice")], agg)
    assert agg.days_present("Alice") == 2


def test_first_seen_name_and_email_are_kept():
    agg = AttendanceAggregate()
    tally_file([rec("Carol", "carol@x.com", "carol@x.com")], agg)
    tally_file([rec("Carol Smith", "carol@x.com", "carol@x.com")], agg)
    entry = agg.get("carol@x.com")
    assert entry.display_name == "Carol"
    assert entry.email == "carol@x.com"
    assert entry.days_present == 2


def test_unknown_identity_has_zero_days():
    agg = AttendanceAggregate()
    assert agg.days_present("nobody") == 0
    assert "nobody" not in agg
    assert len(agg) == 0


def test_rows_keep_first_appearance_order():
    agg = AttendanceAggregate()
    tally_file([rec("Bob"), rec("Alice")], agg)
    tally_file([rec("Alice"), rec("Zed")], agg)
    assert list(agg) == ["Bob", "Alice", "Zed"]
    assert [r["days_present"] for r in agg.to_rows()] == [1, 2, 1]


def test_tally_consumes_lazy_records():
    agg = AttendanceAggregate()
    counted, _ = tally_file((rec(n) for n in ["A", "B", "A"]), agg)
    assert counted == 2
