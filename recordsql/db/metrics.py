from __future__ import annotations

from ..metrics.registry import DB_WRITE_LATENCY_SECONDS, DB_WRITE_TOTAL


def observe_db_write(table: str, op_type: str, status: str, latency_s: float) -> None:
    """
    Record one DB write.

    Args:
        table: SQL table name (low cardinality: one per record type)
        op_type: Statement kind, e.g. "update"
        status: "success", "no_match" or "error"
        latency_s: Wall-clock duration in seconds
    """
    DB_WRITE_TOTAL.labels(table=table, op_type=op_type, status=status).inc()
    DB_WRITE_LATENCY_SECONDS.labels(table=table, op_type=op_type).observe(latency_s)
