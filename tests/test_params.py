import pytest

from db.errors import InvalidStatementError
from db.params import adapt_placeholders

SQL = "SELECT * FROM t WHERE a = ? AND b = ?"


def test_qmark_statements_are_unchanged():
    assert adapt_placeholders(SQL, "qmark") == SQL


@pytest.mark.parametrize("style", ["format", "pyformat"])
def test_format_drivers_get_percent_s(style):
    assert adapt_placeholders(SQL, style) == "SELECT * FROM t WHERE a = %s AND b = %s"


@pytest.mark.parametrize("style", ["numeric", "named"])
def test_numeric_drivers_get_positional_numbers(style):
    assert adapt_placeholders(SQL, style) == "SELECT * FROM t WHERE a = :1 AND b = :2"


def test_question_marks_inside_literals_and_comments_are_kept():
    sql = "SELECT '?', \"col?\" FROM t -- why?\nWHERE x = ? /* or ? */ AND y = 'it''s ?'"
    assert adapt_placeholders(sql, "numeric") == (
        "SELECT '?', \"col?\" FROM t -- why?\nWHERE x = :1 /* or ? */ AND y = 'it''s ?'"
    )


def test_literal_percent_is_escaped_when_parameters_are_bound():
    sql = "SELECT * FROM t WHERE name LIKE 'a%' AND x = ?"
    assert adapt_placeholders(sql, "pyformat") == "SELECT * FROM t WHERE name LIKE 'a%%' AND x = %s"


def test_literal_percent_is_kept_without_parameters():
    sql = "SELECT * FROM t WHERE name LIKE 'a%'"
    assert adapt_placeholders(sql, "format", has_params=False) == sql


def test_unknown_paramstyle_is_rejected():
    with pytest.raises(InvalidStatementError):
        adapt_placeholders(SQL, "dollar")


def test_question_marks_inside_backtick_identifiers_are_kept():
    sql = "SELECT `a?b` FROM t WHERE x = ?"
    assert adapt_placeholders(sql, "pyformat") == "SELECT `a?b` FROM t WHERE x = %s"


def test_backslash_escaped_quotes_do_not_end_a_literal():
    sql = "SELECT * FROM t WHERE a = 'O\\'Reilly?' AND b = ?"
    assert adapt_placeholders(sql, "pyformat", backslash_escapes=True) == (
        "SELECT * FROM t WHERE a = 'O\\'Reilly?' AND b = %s"
    )


def test_backslashes_are_literal_without_backslash_escapes():
    sql = "SELECT * FROM t WHERE path = 'C:\\' AND b = ?"
    assert adapt_placeholders(sql, "pyformat") == "SELECT * FROM t WHERE path = 'C:\\' AND b = %s"


def test_mysql_connection_rewrites_with_backslash_escapes(fake_connection, monkeypatch):
    from tests import fakedb

    monkeypatch.setattr(fakedb, "paramstyle", "pyformat")
    conn, handle = fake_connection("MySQL")
    conn.query("UPDATE t SET a = 'it\\'s?' WHERE `k?` = ?", 1)
    assert handle.executed == [("UPDATE t SET a = 'it\\'s?' WHERE `k?` = %s", (1,))]
