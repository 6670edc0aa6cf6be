"""Offset-paginated row access for arbitrary tables"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from ..connectors.base import DatabaseConnector
from .values import Row, make_row, row_to_json


@dataclass
class Page:
    """A window of rows plus the total row count of the table"""
    rows: List[Row] = field(default_factory=list)
    total: int = 0
    page_size: int = 15
    page_number: int = 1

    @classmethod
    def empty(cls, page_size: int, page_number: int = 1) -> "Page":
        return cls(rows=[], total=0, page_size=page_size, page_number=page_number)

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def first_item(self) -> Optional[int]:
        """1-based position of the first row on this page"""
        if not self.rows:
            return None
        return (self.page_number - 1) * self.page_size + 1

    @property
    def last_item(self) -> Optional[int]:
        if not self.rows:
            return None
        return self.first_item + len(self.rows) - 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "rows": [row_to_json(row) for row in self.rows],
            "total": self.total,
            "page_size": self.page_size,
            "page_number": self.page_number,
            "last_page": self.last_page,
            "from": self.first_item,
            "to": self.last_item,
        }


class PaginatedReader:
    """
    Reads pages and single rows through a connector

    Callers bound ``page_size``; the reader only rejects non-positive sizes.
    With no connector every read is empty.
    """

    def __init__(self, connector: Optional[DatabaseConnector]):
        self.connector = connector

    def page(
        self,
        table_name: str,
        page_size: int,
        page_number: int = 1,
        order_by: Optional[str] = None,
    ) -> Page:
        """
        Read one page of a table

        Args:
            table_name: Table to read
            page_size: Rows per page, must be positive
            page_number: 1-based page number; values below 1 read the first page
            order_by: Column to sort by descending; natural order when omitted

        Returns:
            Page of rows with the table's total row count
        """
        if page_size < 1:
            raise ValueError(f"page_size must be a positive integer, got {page_size}")
        page_number = max(1, page_number)

        if self.connector is None:
            return Page.empty(page_size, page_number)

        total = self.connector.get_row_count(table_name)
        offset = (page_number - 1) * page_size
        rows = []
        if offset < total:
            rows = self.connector.fetch_rows(table_name, page_size, offset, order_by=order_by)

        logger.debug(f"Read page {page_number} of {table_name} ({len(rows)}/{total} rows)")
        return Page(
            rows=[make_row(row) for row in rows],
            total=total,
            page_size=page_size,
            page_number=page_number,
        )

    def get_one(self, table_name: str, column: str, value: Any) -> Optional[Row]:
        """First row whose ``column`` equals ``value``, or None"""
        if self.connector is None:
            return None
        row = self.connector.fetch_one(table_name, column, value)
        return make_row(row) if row is not None else None
