from decimal import Decimal

from sqlassist.tools.charts import aggregate_statistics, choose_category, recommend, summarize
from sqlassist.utils.values import looks_numeric, parse_float


def test_line_when_date_and_numeric():
    rows = [{"orderDate": "2024-01-01", "amount": "12.5"}]
    assert choose_category(rows, ["orderDate", "amount"]) == "line"


def test_bar_when_several_numeric_columns():
    rows = [{"a": 1, "b": "2"}] * 20
    assert choose_category(rows, ["a", "b"]) == "bar"


def test_pie_for_single_numeric_and_few_rows():
    rows = [{"label": "x", "n": str(i)} for i in range(10)]
    assert choose_category(rows, ["label", "n"]) == "pie"


def test_table_otherwise():
    rows = [{"label": "x", "n": str(i)} for i in range(11)]
    assert choose_category(rows, ["label", "n"]) == "table"
    assert choose_category([], []) == "table"


def test_type_inference_uses_first_row_only():
    rows = [{"a": "n/a", "b": "1"}, {"a": "5", "b": "2"}]
    assert choose_category(rows, ["a", "b"]) == "pie"
    assert recommend(rows).numeric_columns == ["b"]


def test_aggregates_skip_unparseable_values():
    rows = [{"v": "10"}, {"v": "oops"}, {"v": "20"}, {"v": None}, {"v": 30}]
    stats = aggregate_statistics(rows, ["v"])
    assert stats == {"v": {"min": 10.0, "max": 30.0, "avg": 20.0, "count": 3}}


def test_numeric_column_without_parseable_values_is_omitted():
    rows = [{"v": "1", "w": "2"}] + [{"v": "x", "w": "3"}]
    rec = recommend([{"v": "1", "w": "2"}])
    assert "v" in rec.statistics
    stats = aggregate_statistics([{"v": "x"}, {"v": ""}], ["v"])
    assert stats == {}
    assert recommend(rows).statistics["w"]["count"] == 2


def test_recommend_without_numeric_columns_is_summary_kind():
    rec = recommend([{"name": "A"}, {"name": "B"}])
    assert rec.kind == "summary"
    assert rec.statistics == {}
    assert rec.message == "Found 2 records with 1 columns"
    assert rec.category == "pie"


def test_summary_sanitizes_column_names():
    s = summarize([{"Order Date": "2024-01-01", "amount ($)": "3", "ok_col": "x"}])
    assert s.column_names == ["OrderDate", "amount", "ok_col"]
    assert s.total_rows == 1
    assert s.column_count == 3
    assert s.has_numeric_data
    assert s.has_date_data


def test_value_parsing():
    assert parse_float("  3.5 ") == 3.5
    assert parse_float("1e3") == 1000.0
    assert parse_float("") is None
    assert parse_float("abc") is None
    assert parse_float(True) is None
    assert parse_float(float("nan")) is None
    assert parse_float(Decimal("2.5")) == 2.5
    assert looks_numeric(7)
    assert not looks_numeric(None)
    assert parse_float("12abc") == 12.0
    assert parse_float("  -.5e1 units") == -5.0
    assert parse_float("1,234") == 1.0


def test_unit_suffixed_values_are_numeric():
    rows = [{"item": "bolt", "weight": "12 kg"}, {"item": "nut", "weight": "8 kg"}]
    assert summarize(rows).has_numeric_data
    assert choose_category(rows, ["item", "weight"]) == "pie"
    rec = recommend(rows)
    assert rec.kind == "aggregated"
    assert rec.statistics == {"weight": {"min": 8.0, "max": 12.0, "avg": 10.0, "count": 2}}


def test_percent_and_thousands_values_aggregate_on_prefix():
    rows = [{"share": "10%", "total": "1,234"}, {"share": "30%", "total": "2,000"}]
    assert choose_category(rows, ["share", "total"]) == "bar"
    stats = aggregate_statistics(rows, ["share", "total"])
    assert stats["share"] == {"min": 10.0, "max": 30.0, "avg": 20.0, "count": 2}
    assert stats["total"]["max"] == 2.0


def test_date_strings_count_as_numeric_prefix():
    rows = [{"shipped": "2024-01-05"}]
    assert looks_numeric(rows[0]["shipped"])
    assert choose_category(rows, ["shipped"]) == "pie"
