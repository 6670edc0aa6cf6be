"""Row data module"""

from .reader import Page, PaginatedReader
from .values import CellValue, Row, ValueKind, make_row

__all__ = ["Page", "PaginatedReader", "CellValue", "Row", "ValueKind", "make_row"]
