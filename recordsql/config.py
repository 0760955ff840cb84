from dataclasses import dataclass
from typing import Callable

from . import naming


@dataclass(frozen=True)
class NamingConvention:
    """
    Pure functions deriving SQL names and the primary key from Python names.

    Fields explicitly declared with ``column(name=...)`` or
    ``column(primary_key=True)`` bypass the convention.
    """
    table_name: Callable[[str], str] = naming.table_name
    column_name: Callable[[str], str] = naming.column_name
    is_primary_key: Callable[[str], bool] = naming.is_primary_key

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        for attr in ("table_name", "column_name", "is_primary_key"):
            if not callable(getattr(self, attr)):
                raise TypeError(f"NamingConvention.{attr} must be callable")


DEFAULT_NAMING = NamingConvention()
