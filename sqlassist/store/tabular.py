"""
In-memory single-table store for uploaded data files.

A ``Table`` is an ordered list of row dicts. Its column set is fixed from the
first row when the table is built; later rows with other keys are kept as-is
and show up as data-quality signals in profiling.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import pandas as pd

from sqlassist.errors import EmptySourceError
from sqlassist.exec.duck import DuckDBExecutor

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

LOCAL_TABLE_NAME = "UPLOADED_DATA"
SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls", ".parquet")


@dataclass(frozen=True)
class ColumnDescriptor:
    table_name: str
    column_name: str
    data_type: str
    nullable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "column_name": self.column_name,
            "data_type": self.data_type,
            "nullable": self.nullable,
        }


class Table:
    def __init__(self, rows: Sequence[Row]):
        self._rows: List[Row] = list(rows)
        self._columns: List[str] = list(self._rows[0].keys()) if self._rows else []

    @property
    def rows(self) -> List[Row]:
        return self._rows

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def __getitem__(self, idx):
        return self._rows[idx]

    def describe_schema(self) -> List[ColumnDescriptor]:
        # No full scan here; callers infer numeric/date types on their own.
        return [ColumnDescriptor(table_name=LOCAL_TABLE_NAME, column_name=c, data_type="VARCHAR", nullable=True) for c in self._columns]


def is_supported_file(name: str) -> bool:
    return name.lower().endswith(SUPPORTED_EXTENSIONS)


def _frame_to_rows(df: pd.DataFrame) -> List[Row]:
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def read_rows(path: str) -> List[Row]:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        # Values stay text, blanks stay "", mirroring a plain CSV split.
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True, skip_blank_lines=True)
        except pd.errors.EmptyDataError:
            return []
        if df.empty:
            return []
        df.columns = [str(c).strip() for c in df.columns]
        df = df.fillna("")
        return _frame_to_rows(df.apply(lambda s: s.str.strip()))
    if ext in (".xlsx", ".xls"):
        # first sheet only
        df = pd.read_excel(path, sheet_name=0)
        return _frame_to_rows(df)
    if ext == ".parquet":
        executor = DuckDBExecutor()
        try:
            return executor.read_parquet_rows(path)
        finally:
            executor.close()
    raise ValueError(f"Unsupported data file type: {ext or path}")


def load_table(path: str) -> Table:
    rows = read_rows(path)
    if not rows:
        raise EmptySourceError("Data file is empty", details=os.path.basename(path))
    table = Table(rows)
    logger.info("Data file processed: %s rows, %s columns (%s)", len(table), len(table.columns), os.path.basename(path))
    return table
