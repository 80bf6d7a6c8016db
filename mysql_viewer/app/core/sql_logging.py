import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

logger = logging.getLogger("mysql_viewer.sql")

LOG_FORMATS = ("compact", "formatted", "pretty")
BOX_WIDTH = 60

# Multi-word keywords first so "LEFT JOIN" is not split at "JOIN"
_BREAK_KEYWORDS = [
    "INNER JOIN", "LEFT JOIN", "RIGHT JOIN", "GROUP BY", "ORDER BY",
    "SELECT", "FROM", "WHERE", "JOIN", "HAVING", "LIMIT", "OFFSET",
]
_BREAK_RE = re.compile(
    r"\s+(" + "|".join(k.replace(" ", r"\s+") for k in _BREAK_KEYWORDS) + r")\s+",
    re.IGNORECASE,
)
_DEDENT_RE = re.compile(r"^(FROM|WHERE|GROUP BY|ORDER BY|HAVING)\b", re.IGNORECASE)
_INDENT_RE = re.compile(r"^(SELECT|FROM|WHERE|JOIN|GROUP BY|ORDER BY|HAVING)\b", re.IGNORECASE)


def normalize_sql(sql: str) -> str:
    """Turn escaped newlines into spaces and collapse whitespace runs."""
    return re.sub(r"\s+", " ", sql.replace("\\n", " ")).strip()


def format_sql(sql: str) -> str:
    """Break SQL before its major keywords and indent the clauses."""
    formatted = _BREAK_RE.sub(
        lambda m: "\n" + re.sub(r"\s+", " ", m.group(1)).upper() + " ",
        normalize_sql(sql),
    )

    lines = []
    indent = 0
    for line in formatted.split("\n"):
        line = line.strip()
        if not line:
            continue
        if _DEDENT_RE.match(line):
            indent = max(0, indent - 1)
        lines.append("  " * indent + line)
        if _INDENT_RE.match(line):
            indent += 1
    return "\n".join(lines)


def _params_json(params: Optional[Mapping[str, Any]]) -> str:
    return json.dumps(dict(params or {}), default=str, ensure_ascii=False)


def render_sql_log(mode: str, timestamp: str, sql: str, params: Optional[Mapping[str, Any]] = None) -> str:
    if mode == "compact":
        text = f"[{timestamp}] SQL: {normalize_sql(sql)}"
        if params:
            text += f" | Params: {_params_json(params)}"
        return text

    if mode == "pretty":
        out = [f"[{timestamp}] SQL QUERY:", "┌" + "─" * BOX_WIDTH + "┐"]
        for line in format_sql(sql).split("\n"):
            out.append(f"│ {line.ljust(BOX_WIDTH - 2)} │")
        if params:
            out.append(f"│ {('Parameters: ' + _params_json(params)).ljust(BOX_WIDTH - 2)} │")
        out.append("└" + "─" * BOX_WIDTH + "┘")
        return "\n".join(out)

    # formatted, also the fallback for unknown modes
    out = [f"[{timestamp}] Executing SQL:", format_sql(sql)]
    if params:
        out.append(f"Parameters: {_params_json(params)}")
    return "\n".join(out)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def log_sql(mode: str, sql: str, params: Optional[Mapping[str, Any]] = None, timestamp: Optional[str] = None) -> str:
    timestamp = timestamp or now_iso()
    logger.info(render_sql_log(mode, timestamp, sql, params))
    return timestamp
