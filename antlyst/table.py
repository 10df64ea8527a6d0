from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    TEXT = "text"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Column:
    """One parsed CSV column. Missing cells are stored as ``None``."""

    name: str
    type: ColumnType
    values: tuple[Any, ...]

    @property
    def present_values(self) -> list[Any]:
        return [value for value in self.values if value is not None]

    @property
    def missing_count(self) -> int:
        return sum(1 for value in self.values if value is None)


@dataclass(frozen=True)
class Table:
    columns: tuple[Column, ...]
    row_count: int

    def __post_init__(self) -> None:
        names = [column.name for column in self.columns]
        if len(set(names)) != len(names):
            raise ValueError(f"Column names must be unique: {names}")
        for column in self.columns:
            if len(column.values) != self.row_count:
                raise ValueError(
                    f"Column '{column.name}' has {len(column.values)} values, expected {self.row_count}."
                )

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def columns_of_type(self, column_type: ColumnType) -> list[Column]:
        return [column for column in self.columns if column.type is column_type]

    @property
    def numeric_columns(self) -> list[Column]:
        return self.columns_of_type(ColumnType.NUMERIC)

    @property
    def text_columns(self) -> list[Column]:
        return self.columns_of_type(ColumnType.TEXT)


def json_value(value: Any) -> Any:
    """Whole-number floats become ints so integer columns serialize as ``10`` rather than ``10.0``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
