from __future__ import annotations

import logging
import os
import re
from typing import Optional, Sequence

from openai import OpenAI, OpenAIError

from sqlassist.store.tabular import ColumnDescriptor
from sqlassist.utils.privacy import limit_schema

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:sql)?\s*(.*?)\s*```$", re.IGNORECASE | re.DOTALL)


def schema_text(schema: Sequence[ColumnDescriptor]) -> str:
    return "\n".join(f"{c.table_name}.{c.column_name} ({c.data_type})" for c in schema)


def strip_fences(text: str) -> str:
    text = (text or "").strip()
    m = _FENCE_RE.match(text)
    return m.group(1).strip() if m else text


def translate_to_sql(
    question: str,
    schema: Sequence[ColumnDescriptor],
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    dialect: str = "Snowflake",
) -> Optional[str]:
    """
    Ask OpenAI for a single SQL statement answering ``question``.
    Returns None if no API key is configured or the call fails, so callers can
    fall back to the rule-based translator.
    """
    api_key = api_key or os.environ.get("OPENAI_API_KEY")
    if not api_key:
        return None
    client = OpenAI(api_key=api_key)
    model_name = model or os.environ.get("OPENAI_MODEL", "gpt-4o-mini")

    tables = sorted({c.table_name for c in schema})
    prompt = (
        f"You are an expert SQL developer for {dialect}. Given the following database schema and user query, generate a SQL query.\n\n"
        f"Database Schema:\n{schema_text(limit_schema(schema))}\n\n"
        f"User Query: {question}\n\n"
        f"Available tables: {', '.join(tables) if tables else '(none)'}\n\n"
        "Generate a SQL query that:\n"
        "1. Uses ONLY the tables and columns listed above\n"
        "2. Handles the user's intent correctly\n"
        "3. Returns clean, structured data suitable for visualization\n"
        "4. Keeps the query simple and avoids joins unless specifically requested\n\n"
        "Return only the SQL query, no explanations or markdown formatting."
    )
    try:
        resp = client.chat.completions.create(
            model=model_name,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=500,
        )
        content = resp.choices[0].message.content or ""
    except OpenAIError as exc:
        logger.warning("OpenAI translation failed: %s", exc)
        return None
    sql = strip_fences(content)
    return sql or None
