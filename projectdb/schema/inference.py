"""Foreign key inference from column naming conventions"""

from typing import Dict, Iterable, List

from loguru import logger

from ..connectors.base import ForeignKey


class RelationshipInferrer:
    """
    Infers ``<noun>_id`` -> ``<table>.id`` links when no constraints are declared

    Matching is exact against the live table list: a missed relationship is
    acceptable, a wrong link is not.
    """

    SUFFIX = "_id"
    TARGET_COLUMN = "id"

    def infer(self, columns: Iterable[str], available_tables: Iterable[str]) -> Dict[str, ForeignKey]:
        """
        Infer foreign keys for a table's columns

        Args:
            columns: Column names of the table being inspected
            available_tables: Table names present in the database

        Returns:
            Mapping of column name to inferred target
        """
        tables = set(available_tables)
        foreign_keys = {}

        for column in columns:
            if not column.endswith(self.SUFFIX) or column == self.TARGET_COLUMN:
                continue

            base_name = column[:-len(self.SUFFIX)]
            for candidate in self.candidate_tables(base_name):
                if candidate in tables:
                    foreign_keys[column] = ForeignKey(table=candidate, column=self.TARGET_COLUMN)
                    break

        if foreign_keys:
            logger.debug(f"Inferred {len(foreign_keys)} relationships from naming conventions")
        return foreign_keys

    @staticmethod
    def candidate_tables(base_name: str) -> List[str]:
        """Table names to try for a column base noun, most likely first"""
        return [
            base_name + "s",                 # user -> users
            base_name + "es",                # box -> boxes
            base_name,                       # singular table names
            base_name.rstrip("y") + "ies",   # category -> categories
        ]
