import pytest

from sqlassist.tools.charts import Summary
from sqlassist.tools.profile import assess_data_quality, completeness, profile


def test_empty_input_returns_error_sentinel():
    insights = profile([])
    assert insights.data_quality == {"status": "error", "message": "No data available"}
    assert insights.key_findings == []


def test_completeness_bounds():
    rows = [{"a": "", "b": "x"}, {"a": "  ", "b": "y"}, {"a": None, "b": "z"}]
    metrics = assess_data_quality(rows)["metrics"]
    assert metrics["completeness"]["a"] == 0
    assert metrics["completeness"]["b"] == 100


def test_uniqueness_counts_nulls_consistency_does_not():
    rows = [{"c": 1}, {"c": 1}, {"c": None}]
    metrics = assess_data_quality(rows)["metrics"]
    assert metrics["uniqueness"]["c"] == pytest.approx(66.67, abs=0.01)
    cons = metrics["consistency"]["c"]
    assert cons["total_count"] == 2
    assert cons["unique_count"] == 1
    assert cons["variety_score"] == 0.5


def test_variety_score_guarded_when_all_null():
    rows = [{"c": None}, {"c": None}]
    cons = assess_data_quality(rows)["metrics"]["consistency"]["c"]
    assert cons["total_count"] == 0
    assert cons["variety_score"] is None


def test_sample_is_first_100_rows():
    rows = [{"id": str(i)} for i in range(250)]
    dq = assess_data_quality(rows)
    assert dq["status"] == "good"
    assert dq["sample_size"] == 100
    assert dq["total_columns"] == 1
    assert dq["metrics"]["uniqueness"]["id"] == 100


def test_findings_and_recommendations_are_independent_checks():
    summary = Summary(total_rows=150, column_count=6, column_names=list("abcdef"), has_numeric_data=True, has_date_data=True)
    insights = profile([{"a": 1}], summary)
    assert insights.key_findings == [
        "Dataset contains numeric data suitable for statistical analysis",
        "Date fields present - temporal analysis possible",
        "Large dataset with 150 records",
        "Multi-dimensional data with 6 attributes",
    ]
    assert insights.recommendations == [
        "Consider creating charts to visualize numeric trends",
        "Time-series analysis could reveal temporal patterns",
        "Large dataset - consider sampling for quick analysis",
    ]


def test_small_text_dataset_has_no_findings():
    insights = profile([{"name": "A"}, {"name": "B"}])
    assert insights.key_findings == []
    assert insights.recommendations == []


def test_zero_counts_as_present():
    sample = [{"qty": 0}, {"qty": "0"}, {"qty": "  "}, {"qty": None}]
    assert completeness(sample, ["qty"]) == {"qty": 50.0}
