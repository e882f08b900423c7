"""
db/params.py
------------
Positional placeholder portability.

SQL handed to the Connection always uses ``?`` placeholders. Before execution
they are rewritten to the DB-API ``paramstyle`` of the driver in use. A ``?``
inside quoted literals, quoted identifiers (including MySQL backticks) or
comments is not a placeholder.
"""

from db.errors import InvalidStatementError

_FORMAT_STYLES = {"format", "pyformat"}
_NUMERIC_STYLES = {"numeric", "named"}
_KNOWN_STYLES = _FORMAT_STYLES | _NUMERIC_STYLES | {"qmark"}


def adapt_placeholders(
    sql: str,
    paramstyle: str,
    has_params: bool = True,
    backslash_escapes: bool = False,
) -> str:
    """
    Rewrite ``?`` placeholders for a driver's paramstyle.

    Args:
        sql: Statement text written with ``?`` placeholders.
        paramstyle: The driver module's DB-API ``paramstyle``.
        has_params: Whether parameters will be bound. ``format`` drivers only
            interpret ``%`` when they are, so literal ``%`` is doubled then.
        backslash_escapes: Whether ``\\`` escapes the next character inside
            string literals (MySQL default). Standard SQL only doubles quotes.

    Returns:
        The statement in the driver's native placeholder syntax.
    """
    if paramstyle not in _KNOWN_STYLES:
        raise InvalidStatementError(f"Unsupported driver paramstyle: {paramstyle}")
    if paramstyle == "qmark":
        return sql

    escape_percent = paramstyle in _FORMAT_STYLES and has_params
    out: list[str] = []
    position = 0
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch in ("'", '"', "`"):
            end = _end_of_quoted(sql, i, ch, backslash_escapes and ch != "`")
            out.append(_escape(sql[i:end], escape_percent))
            i = end
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            end = n if end == -1 else end
            out.append(_escape(sql[i:end], escape_percent))
            i = end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append(_escape(sql[i:end], escape_percent))
            i = end
        elif ch == "?":
            position += 1
            out.append("%s" if paramstyle in _FORMAT_STYLES else f":{position}")
            i += 1
        elif ch == "%" and escape_percent:
            out.append("%%")
            i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _end_of_quoted(sql: str, start: int, quote: str, backslash_escapes: bool = False) -> int:
    """Index just past the quoted run opened at ``start`` (doubled quotes escape)."""
    i = start + 1
    n = len(sql)
    while i < n:
        if backslash_escapes and sql[i] == "\\":
            i += 2
            continue
        if sql[i] == quote:
            if i + 1 < n and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def _escape(chunk: str, escape_percent: bool) -> str:
    return chunk.replace("%", "%%") if escape_percent else chunk
