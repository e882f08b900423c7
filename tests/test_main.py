from main import check_source


def test_check_source_succeeds_for_sqlite(sqlite_source):
    assert check_source(sqlite_source) is True


def test_check_source_reports_unknown_source():
    assert check_source("no-such-source") is False
