"""Tagged cell values for rows of unknown shape"""

import base64
import datetime
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping


class ValueKind(Enum):
    """Kinds of values a cell can hold"""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    BYTES = "bytes"
    DATETIME = "datetime"
    JSON = "json"


@dataclass(frozen=True)
class CellValue:
    """A single column value tagged with its kind"""
    kind: ValueKind
    value: Any

    @classmethod
    def from_python(cls, value: Any) -> "CellValue":
        """Tag a value as returned by the database driver"""
        if value is None:
            return cls(ValueKind.NULL, None)
        # bool before number: bool is a subclass of int
        if isinstance(value, bool):
            return cls(ValueKind.BOOL, value)
        if isinstance(value, (int, float, Decimal)):
            return cls(ValueKind.NUMBER, value)
        if isinstance(value, str):
            return cls(ValueKind.STRING, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(ValueKind.BYTES, bytes(value))
        if isinstance(value, (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)):
            return cls(ValueKind.DATETIME, value)
        if isinstance(value, (dict, list, tuple)):
            return cls(ValueKind.JSON, value)
        return cls(ValueKind.STRING, str(value))

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def to_json(self) -> Any:
        """JSON-safe rendering of the value"""
        value = self.value
        if self.kind is ValueKind.NUMBER and isinstance(value, Decimal):
            return str(value)
        if self.kind is ValueKind.BYTES:
            return base64.b64encode(value).decode("ascii")
        if self.kind is ValueKind.DATETIME:
            if isinstance(value, datetime.timedelta):
                return str(value)
            return value.isoformat()
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": self.to_json()}


Row = Dict[str, CellValue]


def make_row(raw: Mapping[str, Any]) -> Row:
    """Build a row from a driver mapping, keeping column order"""
    return {column: CellValue.from_python(value) for column, value in raw.items()}


def row_to_json(row: Row) -> Dict[str, Any]:
    return {column: cell.to_dict() for column, cell in row.items()}
