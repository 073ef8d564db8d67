import pytest

from sql_checker.splitter import split_statements


def test_split_on_semicolons():
    assert split_statements("select 1; select 2;") == ["select 1", "select 2"]


def test_split_keeps_semicolons_inside_literals():
    statements = split_statements("select 'a;b' from t; select 2;")
    assert statements == ["select 'a;b' from t", "select 2"]


def test_split_drops_blank_fragments():
    assert split_statements("") == []
    assert split_statements("  \n ; ;\n") == []


def test_split_custom_delimiter():
    assert split_statements("select 1 $$ select 2 $$ ", delimiter="$$") == ["select 1", "select 2"]


def test_split_rejects_empty_delimiter():
    with pytest.raises(ValueError):
        split_statements("select 1", delimiter="")


def test_word_delimiter_only_splits_on_its_own_line():
    text = "select name from CATEGORY\nGO\nselect 1\n  go  \nselect algo from t\nGO\n"
    assert split_statements(text, delimiter="GO") == [
        "select name from CATEGORY",
        "select 1",
        "select algo from t",
    ]
