from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Hashable
from typing import Any, Dict, List, Optional, Sequence

from sqlassist.tools.charts import Summary, summarize

SAMPLE_ROWS = 100

NO_DATA = {"status": "error", "message": "No data available"}


def _distinct(values: Sequence[Any]) -> int:
    # nested values (lists, structs) compare by their repr
    return len({v if isinstance(v, Hashable) else repr(v) for v in values})


@dataclass(frozen=True)
class Insights:
    data_quality: Dict[str, Any]
    key_findings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_quality": self.data_quality,
            "key_findings": list(self.key_findings),
            "recommendations": list(self.recommendations),
        }


def completeness(sample: Sequence[Dict[str, Any]], columns: Sequence[str]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    # 0 and False are present values; only None and blank text are missing
    for col in columns:
        non_empty = sum(1 for row in sample if row.get(col) is not None and str(row.get(col)).strip() != "")
        out[col] = 100.0 * non_empty / len(sample)
    return out


def consistency(sample: Sequence[Dict[str, Any]], columns: Sequence[str]) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    for col in columns:
        values = [row.get(col) for row in sample if row.get(col) is not None]
        distinct = _distinct(values)
        out[col] = {
            "unique_count": distinct,
            "total_count": len(values),
            "variety_score": (distinct / len(values)) if values else None,
        }
    return out


def uniqueness(sample: Sequence[Dict[str, Any]], columns: Sequence[str]) -> Dict[str, float]:
    # Nulls count here, unlike consistency.
    out: Dict[str, float] = {}
    for col in columns:
        values = [row.get(col) for row in sample]
        out[col] = 100.0 * _distinct(values) / len(values)
    return out


def assess_data_quality(rows: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    if not rows:
        return dict(NO_DATA)
    sample = list(rows[:SAMPLE_ROWS])
    columns = list(rows[0].keys())
    return {
        "status": "good",
        "metrics": {
            "completeness": completeness(sample, columns),
            "consistency": consistency(sample, columns),
            "uniqueness": uniqueness(sample, columns),
        },
        "sample_size": len(sample),
        "total_columns": len(columns),
    }


def key_findings(summary: Summary) -> List[str]:
    findings: List[str] = []
    if summary.has_numeric_data:
        findings.append("Dataset contains numeric data suitable for statistical analysis")
    if summary.has_date_data:
        findings.append("Date fields present - temporal analysis possible")
    if summary.total_rows > 100:
        findings.append(f"Large dataset with {summary.total_rows} records")
    if summary.column_count > 5:
        findings.append(f"Multi-dimensional data with {summary.column_count} attributes")
    return findings


def recommendations(summary: Summary) -> List[str]:
    recs: List[str] = []
    if summary.has_numeric_data:
        recs.append("Consider creating charts to visualize numeric trends")
    if summary.has_date_data:
        recs.append("Time-series analysis could reveal temporal patterns")
    if summary.total_rows > 50:
        recs.append("Large dataset - consider sampling for quick analysis")
    return recs


def profile(rows: Sequence[Dict[str, Any]], summary: Optional[Summary] = None) -> Insights:
    summary = summary or summarize(rows)
    return Insights(
        data_quality=assess_data_quality(rows),
        key_findings=key_findings(summary),
        recommendations=recommendations(summary),
    )
