import pytest

from attendance.ingest import guess_delimiter
from attendance.tokenizer import iter_rows, tokenize_line


def test_tab_fields_are_trimmed():
    assert tokenize_line(" Alice \t  Presenter ", "\t") == ["Alice", "Presenter"]


def test_quoted_field_keeps_delimiter():
    assert tokenize_line('a,"b,c",d', ",") == ["a", "b,c", "d"]


def test_doubled_quote_is_literal():
    assert tokenize_line('"say ""hi""",x', ",") == ['say "hi"', "x"]


def test_unterminated_quote_takes_rest_of_line():
    assert tokenize_line('a,"b,c', ",") == ["a", "b,c"]


def test_quoted_field_after_space_with_trim():
    assert tokenize_line('x, "y, z" ', ",") == ["x", "y, z"]


def test_no_trim_keeps_whitespace():
    assert tokenize_line(" a \tb ", "\t", trim=False) == [" a ", "b "]


def test_empty_lines_produce_no_fields():
    assert tokenize_line("", "\t") == []
    assert tokenize_line("   ", "\t") == []


def test_quote_disabled():
    assert tokenize_line('"a",b', ",", quote=None) == ['"a"', "b"]
    assert tokenize_line('"a",b', ",", quote="") == ['"a"', "b"]


def test_bad_delimiter():
    with pytest.raises(ValueError):
        tokenize_line("a,b", ",,")


def test_quote_same_as_delimiter():
    with pytest.raises(ValueError):
        tokenize_line("Name\tRole", "\t", quote="\t")


def test_iter_rows_skips_empty_rows():
    lines = ["a\tb", "", "\t\t", "c"]
    assert list(iter_rows(lines, "\t")) == [["a", "b"], ["c"]]


def test_guess_delimiter():
    assert guess_delimiter("Name\tRole\nAlice\tPresenter\n") == "\t"
    assert guess_delimiter("Name;Role\nAlice;Presenter\n") == ";"
    assert guess_delimiter("") == "\t"
