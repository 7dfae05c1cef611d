from sqlassist.config import Settings
from sqlassist.planner.openai_translator import schema_text, strip_fences, translate_to_sql
from sqlassist.planner.rule_planner import parse_question, plan_sql
from sqlassist.service.assistant import DefaultTranslator
from sqlassist.store.tabular import ColumnDescriptor, Table

schema = Table([{"name": "A", "unit_price": "1", "order_date": "2024-01-01"}]).describe_schema()


def test_everything_maps_to_select_star():
    assert plan_sql("show me everything", schema) == "SELECT * FROM UPLOADED_DATA"


def test_mentioned_columns_are_projected():
    sql = plan_sql("list name and unit price", schema)
    assert sql == "SELECT name, unit_price FROM UPLOADED_DATA"


def test_sort_and_limit_are_rendered():
    res = parse_question("show name and order_date sorted by order_date desc", ["name", "unit_price", "order_date"])
    assert res.columns == ["name", "order_date"]
    assert res.order_by == "order_date"
    assert res.descending
    sql = plan_sql("first 5 rows", schema)
    assert sql == "SELECT * FROM UPLOADED_DATA LIMIT 5"


def test_remote_table_name_comes_from_schema():
    remote = [ColumnDescriptor("ORDERS", "ID", "NUMBER", False)]
    assert plan_sql("everything please", remote) == "SELECT * FROM ORDERS"


def test_strip_fences():
    assert strip_fences("```sql\nSELECT 1\n```") == "SELECT 1"
    assert strip_fences("  SELECT 2 ") == "SELECT 2"


def test_schema_text():
    assert schema_text(schema[:1]) == "UPLOADED_DATA.name (VARCHAR)"


def test_openai_translator_without_key_returns_none(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert translate_to_sql("anything", schema) is None


def test_default_translator_falls_back_to_rules(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    translator = DefaultTranslator(Settings(openai_api_key=None))
    assert translator("show me everything", schema) == "SELECT * FROM UPLOADED_DATA"


def test_parse_question_fields():
    names = ["name", "unit_price", "order_date"]
    plan = parse_question("show all rows", names)
    assert plan.columns == []
    plan = parse_question("top 3 unit price", names)
    assert (plan.columns, plan.limit, plan.order_by) == (["unit_price"], 3, None)
