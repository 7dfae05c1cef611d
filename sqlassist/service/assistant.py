"""
Request-level operations: submit a question, connect the warehouse, describe
the remote schema, health.

A question is answered from the first data file in the uploads directory when
one exists. Without a file it goes to Snowflake only if the warehouse was
connected explicitly beforehand; otherwise the caller gets an advisory asking
for a data file.
"""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlassist.config import Settings
from sqlassist.errors import AssistantError, InternalProcessingError, SourceUnavailableError, RemoteAuthError, ValidationError
from sqlassist.exec.mini_sql import execute
from sqlassist.exec.warehouse import SnowflakeWarehouse
from sqlassist.planner.openai_translator import translate_to_sql
from sqlassist.planner.rule_planner import plan_sql
from sqlassist.report.composer import SOURCE_LOCAL, SOURCE_REMOTE, ResponseEnvelope, compose
from sqlassist.service.controller import MODE_LOCAL, MODE_NONE, MODE_REMOTE, ModeController
from sqlassist.store.tabular import LOCAL_TABLE_NAME, ColumnDescriptor, Row
from sqlassist.tools.charts import recommend, summarize
from sqlassist.tools.profile import profile
from sqlassist.utils.privacy import limit_schema

logger = logging.getLogger(__name__)

Translator = Callable[[str, Sequence[ColumnDescriptor]], str]


class DefaultTranslator:
    """OpenAI when a key is configured, rule-based translation otherwise."""

    def __init__(self, settings: Settings, use_llm: bool = True):
        self.settings = settings
        self.use_llm = use_llm

    def __call__(self, question: str, schema: Sequence[ColumnDescriptor]) -> str:
        if self.use_llm and self.settings.openai_api_key:
            local = all(c.table_name == LOCAL_TABLE_NAME for c in schema)
            sql = translate_to_sql(
                question,
                schema,
                model=self.settings.openai_model,
                api_key=self.settings.openai_api_key,
                dialect="ANSI SQL" if local else "Snowflake",
            )
            if sql:
                return sql
            logger.warning("Falling back to rule-based translation")
        return plan_sql(question, schema)


@dataclass(frozen=True)
class QueryOutcome:
    success: bool
    mode: str
    message: str
    envelope: Optional[ResponseEnvelope] = None
    action: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "mode": self.mode, "message": self.message}
        if self.action:
            out["action"] = self.action
        if self.envelope is not None:
            out["structured_output"] = self.envelope.to_dict()
        return out


@dataclass(frozen=True)
class ConnectOutcome:
    success: bool
    mode: str
    message: str
    details: Optional[str] = None
    warehouse: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "mode": self.mode, "message": self.message}
        if self.details:
            out["details"] = self.details
        if self.warehouse:
            out["warehouse"] = self.warehouse
        return out


def analyze(query: str, statement: str, rows: List[Row], data_source: str) -> ResponseEnvelope:
    try:
        summary = summarize(rows)
        insights = profile(rows, summary)
        chart = recommend(rows, list(rows[0].keys()) if rows else [])
        return compose(query, statement, rows, summary, insights, chart, data_source=data_source)
    except Exception as exc:
        logger.exception("Result analysis failed")
        raise InternalProcessingError("Failed to process query results", details=str(exc)) from exc


class Assistant:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        translator: Optional[Translator] = None,
        warehouse: Optional[SnowflakeWarehouse] = None,
        controller: Optional[ModeController] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.translator = translator or DefaultTranslator(self.settings)
        self.warehouse = warehouse or SnowflakeWarehouse(self.settings.snowflake)
        self.controller = controller or ModeController(self.settings.uploads_dir)

    @property
    def mode(self) -> str:
        return self.controller.mode

    async def translate(self, question: str, schema: Sequence[ColumnDescriptor]) -> str:
        limited = limit_schema(schema)
        try:
            return await asyncio.to_thread(self.translator, question, limited)
        except Exception as exc:
            raise InternalProcessingError("Failed to generate SQL", details=str(exc)) from exc

    async def submit_query(self, query: Optional[str]) -> QueryOutcome:
        if not query or not str(query).strip():
            raise ValidationError("Query is required")

        try:
            session = await self.controller.acquire_local()
        except SourceUnavailableError as exc:
            if self.warehouse.was_connected:
                return await self._remote_query(query)
            self.controller.mark_none()
            logger.info("No local data file and no warehouse connection")
            return QueryOutcome(
                success=False,
                mode=MODE_NONE,
                message=f"{exc.message}. Please place a data file in the uploads/ folder.",
                action="upload_data",
            )
        except AssistantError:
            raise
        except Exception as exc:
            logger.exception("Failed to load data file")
            raise InternalProcessingError("Failed to process data file", details=str(exc)) from exc

        table = session.table
        statement = await self.translate(query, table.describe_schema())
        logger.info("Generated SQL: %s", statement)
        rows = execute(statement, table)
        envelope = analyze(query, statement, rows, SOURCE_LOCAL)
        return QueryOutcome(
            success=True,
            mode=MODE_LOCAL,
            message=f"Using data file: {os.path.basename(session.source)}",
            envelope=envelope,
        )

    async def _remote_query(self, query: str) -> QueryOutcome:
        schema = await self.warehouse.describe_schema()
        statement = await self.translate(query, schema)
        logger.info("Generated SQL (remote): %s", statement)
        rows = await self.warehouse.execute(statement)
        self.controller.mark_remote()
        envelope = analyze(query, statement, rows, SOURCE_REMOTE)
        return QueryOutcome(success=True, mode=MODE_REMOTE, message="Using Snowflake warehouse", envelope=envelope)

    async def connect_remote(self) -> ConnectOutcome:
        try:
            await self.warehouse.connect()
        except RemoteAuthError as exc:
            return ConnectOutcome(
                success=False,
                mode=self.controller.mode,
                message="Failed to connect to Snowflake",
                details=exc.details or exc.message,
            )
        self.controller.mark_remote()
        return ConnectOutcome(
            success=True,
            mode=MODE_REMOTE,
            message="Connected to Snowflake successfully",
            warehouse=self.warehouse.active_warehouse,
        )

    async def schema(self) -> Dict[str, Any]:
        descriptors = await self.warehouse.describe_schema()
        safe = [d.to_dict() for d in descriptors]
        return {
            "schema": safe,
            "table_count": len({d.table_name for d in descriptors}),
            "column_count": len(safe),
        }

    def health(self) -> Dict[str, str]:
        return {"status": "OK", "message": "SQL assistant is running"}

    def close(self) -> None:
        self.warehouse.close()
