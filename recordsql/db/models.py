from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..errors import ExecutionError


@dataclass(frozen=True)
class StatementResult:
    """
    Outcome of one executed statement.
    """
    statement: str
    values: tuple[Any, ...]
    # None when the driver did not report a count
    rowcount: Optional[int]

    def affected_row_count(self) -> int:
        """
        Number of rows the database reported as matched/modified.

        Raises:
            ExecutionError: If the driver did not report a row count
        """
        if self.rowcount is None or self.rowcount < 0:
            raise ExecutionError(
                "Driver did not report an affected-row count for statement",
                statement=self.statement,
            )
        return self.rowcount
