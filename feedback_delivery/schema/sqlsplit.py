"""Split a SQL script into statements."""

QUOTES = ("'", '"', '`')


def split_statements(sql):
    """Split on ``;`` outside quotes and comments.

    Comments are replaced by a space; quoted text (including escaped or
    doubled quotes and embedded semicolons) is kept verbatim. Empty statements
    are skipped.
    """
    statements = []
    current = []
    i = 0
    length = len(sql)

    while i < length:
        char = sql[i]
        nxt = sql[i + 1] if i + 1 < length else ''

        if char in QUOTES:
            end = _skip_quoted(sql, i)
            current.append(sql[i:end])
            i = end
        elif char == '-' and nxt == '-' and (i + 2 >= length or sql[i + 2] in ' \t\r\n'):
            i = _skip_line(sql, i)
            current.append(' ')
        elif char == '#':
            i = _skip_line(sql, i)
            current.append(' ')
        elif char == '/' and nxt == '*':
            end = sql.find('*/', i + 2)
            i = length if end == -1 else end + 2
            current.append(' ')
        elif char == ';':
            _flush(current, statements)
            current = []
            i += 1
        else:
            current.append(char)
            i += 1

    _flush(current, statements)
    return statements


def _skip_quoted(sql, start):
    """Index just past the quoted literal starting at ``start``."""
    quote = sql[start]
    i = start + 1
    length = len(sql)
    while i < length:
        char = sql[i]
        if char == '\\' and quote != '`':
            i += 2
            continue
        if char == quote:
            # a doubled quote is an escaped quote
            if i + 1 < length and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return length


def _skip_line(sql, start):
    end = sql.find('\n', start)
    return len(sql) if end == -1 else end + 1


def _flush(parts, statements):
    statement = ''.join(parts).strip()
    if statement:
        statements.append(statement)
