"""Dialect word lists and syntax switches consumed by the lexer and layout engine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Dialect:
    """Vocabulary of one SQL flavour.

    Multi-word phrases match across any whitespace run in the source.
    ``join_words`` lists the newline keywords that close a pending
    newline-with-indent level (``... ON a = b JOIN ...``).
    """

    name: str
    reserved_toplevel: tuple[str, ...]
    reserved_newline: tuple[str, ...]
    reserved_newline_with_indent: tuple[str, ...]
    reserved: tuple[str, ...]
    join_words: frozenset[str]
    open_parens: tuple[str, ...] = ("(", "CASE")
    close_parens: tuple[str, ...] = (")", "END")
    string_quotes: tuple[str, ...] = ('"', "'", "`", "[", "N'")
    indexed_placeholders: tuple[str, ...] = ("?",)
    named_placeholders: tuple[str, ...] = ("@", ":")
    line_comments: tuple[str, ...] = ("--", "#")
    aliases: tuple[str, ...] = field(default_factory=tuple)


_JOINS = (
    "CROSS APPLY",
    "CROSS JOIN",
    "INNER JOIN",
    "JOIN",
    "LEFT JOIN",
    "LEFT OUTER JOIN",
    "OUTER APPLY",
    "OUTER JOIN",
    "RIGHT JOIN",
    "RIGHT OUTER JOIN",
)

STANDARD_SQL = Dialect(
    name="sql",
    aliases=("standard", "ansi"),
    reserved_toplevel=(
        "ADD",
        "AFTER",
        "ALTER COLUMN",
        "ALTER TABLE",
        "DELETE FROM",
        "EXCEPT",
        "FETCH FIRST",
        "FROM",
        "GROUP BY",
        "GO",
        "HAVING",
        "INSERT INTO",
        "INSERT",
        "INTERSECT",
        "LIMIT",
        "MODIFY",
        "ORDER BY",
        "SELECT",
        "SET CURRENT SCHEMA",
        "SET SCHEMA",
        "SET",
        "UNION ALL",
        "UNION",
        "UPDATE",
        "VALUES",
        "WHERE",
    ),
    reserved_newline_with_indent=("ON",),
    reserved_newline=(
        "AND",
        *_JOINS,
        "ELSE",
        "OR",
        "WHEN",
        "XOR",
    ),
    join_words=frozenset(_JOINS),
    reserved=(
        "ACCESSIBLE", "ACTION", "AGAINST", "AGGREGATE", "ALGORITHM", "ALL", "ALTER",
        "ANALYSE", "ANALYZE", "AS", "ASC", "AUTOCOMMIT", "AUTO_INCREMENT", "BACKUP",
        "BEGIN", "BETWEEN", "BINLOG", "BOTH", "CASCADE", "CHANGE", "CHANGED",
        "CHARACTER SET", "CHARSET", "CHECK", "CHECKSUM", "COLLATE", "COLLATION",
        "COLUMN", "COLUMNS", "COMMENT", "COMMIT", "COMMITTED", "COMPRESSED",
        "CONCURRENT", "CONSTRAINT", "CONTAINS", "CONVERT", "COUNT", "CREATE",
        "CROSS", "CURRENT_TIMESTAMP", "DATABASE", "DATABASES", "DAY", "DAY_HOUR",
        "DAY_MINUTE", "DAY_SECOND", "DEFAULT", "DEFINER", "DELAYED", "DELETE",
        "DESC", "DESCRIBE", "DETERMINISTIC", "DISTINCT", "DISTINCTROW", "DIV", "DO",
        "DROP", "DUMPFILE", "DUPLICATE", "DYNAMIC", "ENCLOSED", "ENGINE", "ENGINES",
        "ENGINE_TYPE", "ESCAPE", "ESCAPED", "EVENTS", "EXEC", "EXECUTE", "EXISTS",
        "EXPLAIN", "EXTENDED", "FAST", "FIELDS", "FILE", "FIRST", "FIXED", "FLUSH",
        "FOR", "FORCE", "FOREIGN", "FULL", "FULLTEXT", "FUNCTION", "GLOBAL", "GRANT",
        "GRANTS", "GROUP_CONCAT", "HEAP", "HIGH_PRIORITY", "HOSTS", "HOUR",
        "HOUR_MINUTE", "HOUR_SECOND", "IDENTIFIED", "IF", "IFNULL", "IGNORE", "IN",
        "INDEX", "INDEXES", "INFILE", "INSERT_ID", "INSERT_METHOD", "INTERVAL",
        "INTO", "INVOKER", "IS", "ISOLATION", "KEY", "KEYS", "KILL", "LAST_INSERT_ID",
        "LEADING", "LEVEL", "LIKE", "LINEAR", "LINES", "LOAD", "LOCAL", "LOCK",
        "LOCKS", "LOGS", "LOW_PRIORITY", "MARIA", "MASTER", "MASTER_CONNECT_RETRY",
        "MASTER_HOST", "MASTER_LOG_FILE", "MATCH", "MAX_CONNECTIONS_PER_HOUR",
        "MAX_QUERIES_PER_HOUR", "MAX_ROWS", "MAX_UPDATES_PER_HOUR",
        "MAX_USER_CONNECTIONS", "MEDIUM", "MERGE", "MINUTE", "MINUTE_SECOND",
        "MIN_ROWS", "MODE", "MONTH", "MRG_MYISAM", "MYISAM", "NAMES", "NATURAL",
        "NOT", "NULL", "OFFSET", "ONLY", "OPEN",
        "OPTIMIZE", "OPTION", "OPTIONALLY", "OUTFILE", "PACK_KEYS", "PAGE",
        "PARTIAL", "PARTITION", "PARTITIONS", "PASSWORD", "PRIMARY", "PRIVILEGES",
        "PROCEDURE", "PROCESS", "PROCESSLIST", "PURGE", "QUICK", "RAID0",
        "RAID_CHUNKS", "RAID_CHUNKSIZE", "RAID_TYPE", "RANGE", "READ", "READ_ONLY",
        "READ_WRITE", "REFERENCES", "REGEXP", "RELOAD", "RENAME", "REPAIR",
        "REPEATABLE", "REPLACE", "REPLICATION", "RESET", "RESTORE", "RESTRICT",
        "RETURN", "RETURNS", "REVOKE", "RLIKE", "ROLLBACK", "ROW", "ROWS",
        "ROW_FORMAT", "SECOND", "SECURITY", "SEPARATOR", "SERIALIZABLE", "SESSION",
        "SHARE", "SHOW", "SHUTDOWN", "SLAVE", "SONAME", "SOUNDS", "SQL",
        "SQL_AUTO_IS_NULL", "SQL_BIG_RESULT", "SQL_BIG_SELECTS", "SQL_BIG_TABLES",
        "SQL_BUFFER_RESULT", "SQL_CACHE", "SQL_CALC_FOUND_ROWS", "SQL_LOG_BIN",
        "SQL_LOG_OFF", "SQL_LOG_UPDATE", "SQL_LOW_PRIORITY_UPDATES",
        "SQL_MAX_JOIN_SIZE", "SQL_NO_CACHE", "SQL_QUOTE_SHOW_CREATE",
        "SQL_SAFE_UPDATES", "SQL_SELECT_LIMIT", "SQL_SLAVE_SKIP_COUNTER",
        "SQL_SMALL_RESULT", "SQL_WARNINGS", "START", "STARTING", "STATUS", "STOP",
        "STORAGE", "STRAIGHT_JOIN", "STRING", "STRIPED", "SUPER", "TABLE", "TABLES",
        "TEMPORARY", "TERMINATED", "THEN", "TO", "TRAILING", "TRANSACTIONAL",
        "TRUE", "TRUNCATE", "TYPE", "TYPES", "UNCOMMITTED", "UNIQUE", "UNLOCK",
        "UNSIGNED", "USAGE", "USE", "USING", "VARIABLES", "VIEW", "WITH", "WORK",
        "WRITE", "YEAR_MONTH",
    ),
)

_DIALECTS = {STANDARD_SQL.name: STANDARD_SQL}


def get_dialect(name: str) -> Dialect:
    """Resolve a dialect by name or alias (case-insensitive)."""
    wanted = name.lower()
    for dialect in _DIALECTS.values():
        if wanted == dialect.name or wanted in dialect.aliases:
            return dialect
    known = ", ".join(sorted(_DIALECTS))
    raise ValueError(f"unknown dialect {name!r} (expected one of: {known})")
