from __future__ import annotations

from typing import Optional

from sqlassist.report.composer import ResponseEnvelope


def make_concise_answer(envelope: Optional[ResponseEnvelope]) -> str:
    if envelope is None:
        return "Answer: no results."
    count = envelope.full_count
    chart = envelope.chart
    if count == 0:
        return "Answer: query returned no rows."

    stats = chart.statistics
    if stats:
        # lead with the first aggregated column
        col, s = next(iter(stats.items()))
        return (
            f"Answer: {count} rows; {col} avg={s['avg']:.2f} (min={s['min']:g}, max={s['max']:g}) "
            f"- suggested chart: {chart.category}"
        )
    return f"Answer: {count} rows across {envelope.summary.column_count} columns - suggested chart: {chart.category}"
