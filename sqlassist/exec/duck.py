from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import duckdb
import pyarrow as pa


@dataclass
class DuckDBConfig:
    database: str = ":memory:"


class DuckDBExecutor:
    """Thin wrapper used to pull Parquet intake files into Arrow."""

    def __init__(self, config: Optional[DuckDBConfig] = None):
        self.config = config or DuckDBConfig()
        self._con = duckdb.connect(database=self.config.database)

    def query(self, sql: str, params: Optional[List[Any]] = None) -> pa.Table:
        return self._con.execute(sql, params or []).fetch_arrow_table()

    def read_parquet(self, path: str) -> pa.Table:
        return self.query("SELECT * FROM read_parquet(?)", [path])

    def read_parquet_rows(self, path: str) -> List[Dict[str, Any]]:
        return self.read_parquet(path).to_pylist()

    def close(self) -> None:
        self._con.close()
