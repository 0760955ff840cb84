from __future__ import annotations

from prometheus_client import Counter, Histogram

DB_WRITE_TOTAL = Counter(
    "recordsql_db_write_total",
    "Total DB write statements issued for records",
    ["table", "op_type", "status"],
)

DB_WRITE_LATENCY_SECONDS = Histogram(
    "recordsql_db_write_latency_seconds",
    "DB write latency in seconds, from reflection to row-count check",
    ["table", "op_type"],
)
