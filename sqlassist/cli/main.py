import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from sqlassist.config import Settings
from sqlassist.errors import AssistantError, SourceUnavailableError, ValidationError
from sqlassist.report.composer import ResponseEnvelope
from sqlassist.service.assistant import Assistant, DefaultTranslator
from sqlassist.utils.answers import make_concise_answer

logger = logging.getLogger("sqlassist")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _render_rows(console: Console, title: str, rows: List[Dict[str, Any]]) -> None:
    if not rows:
        console.print(Panel.fit("No rows returned"))
        return
    table = Table(title=title)
    for name in rows[0].keys():
        table.add_column(str(name))
    for row in rows:
        table.add_row(*[Text("" if v is None else str(v)) for v in row.values()])
    console.print(table)


def _render_envelope(console: Console, envelope: ResponseEnvelope) -> None:
    console.print(Panel.fit("Executed SQL:"))
    console.print(envelope.generated_sql, markup=False)
    console.print(make_concise_answer(envelope))
    _render_rows(console, f"preview ({envelope.sample_size} of {envelope.full_count} rows)", list(envelope.preview))
    lines = [f"- {f}" for f in envelope.insights.key_findings]
    lines += [f"* {r}" for r in envelope.insights.recommendations]
    complexity = envelope.complexity
    lines.append(f"Query complexity: {complexity['level']}" + (f" ({', '.join(complexity['features'])})" if complexity["features"] else ""))
    console.print(Panel("\n".join(lines), title="Insights"))


def _emit_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


async def _run(args, assistant: Assistant, console: Console) -> int:
    if args.health:
        _emit_json(assistant.health())
        return 0

    if args.connect:
        outcome = await assistant.connect_remote()
        if args.json:
            _emit_json(outcome.to_dict())
        else:
            msg = outcome.message + (f": {outcome.details}" if outcome.details else "")
            console.print(Panel.fit(f"{msg} (mode: {outcome.mode})"))
        if not outcome.success:
            return 1

    async def show_schema() -> int:
        try:
            info = await assistant.schema()
        except SourceUnavailableError as e:
            console.print(Panel.fit(f"{e.message}: {e.details}"))
            return 2
        except AssistantError as e:
            console.print(Panel.fit(str(e)))
            return 1
        if args.json:
            _emit_json(info)
        else:
            table = Table(title=f"schema ({info['table_count']} tables, {info['column_count']} columns)")
            for name in ("table_name", "column_name", "data_type", "nullable"):
                table.add_column(name)
            for col in info["schema"]:
                table.add_row(col["table_name"], col["column_name"], col["data_type"], "YES" if col["nullable"] else "NO")
            console.print(table)
        return 0

    async def run_once(question: str) -> int:
        try:
            outcome = await assistant.submit_query(question)
        except ValidationError as e:
            console.print(Panel.fit(e.message))
            return 2
        except AssistantError as e:
            logger.error("Failed to process query: %s", e)
            console.print(Panel.fit(str(e)))
            return 1
        if args.json:
            _emit_json(outcome.to_dict())
            return 0
        console.print(Panel.fit(outcome.message))
        if outcome.envelope is not None:
            _render_envelope(console, outcome.envelope)
        return 0

    if args.schema:
        return await show_schema()

    # Non-interactive
    if args.query is not None:
        return await run_once(args.query)
    if args.connect:
        return 0

    # Interactive loop
    while True:
        q = Prompt.ask("Ask a question (:connect, :schema, :exit to quit)")
        cmd = q.strip().lower()
        if cmd in {":exit", ":quit", "exit", "quit"}:
            break
        if cmd == ":connect":
            outcome = await assistant.connect_remote()
            console.print(Panel.fit(f"{outcome.message} (mode: {outcome.mode})"))
            continue
        if cmd == ":schema":
            await show_schema()
            continue
        await run_once(q)
    return 0


def main(argv: Optional[List[str]] = None):
    argv = argv if argv is not None else sys.argv[1:]
    import argparse
    parser = argparse.ArgumentParser(prog="sqlassist", description="Natural-language SQL assistant")
    parser.add_argument("--uploads-dir", dest="uploads_dir", default=None, help="Directory scanned for a CSV/Excel/Parquet file (defaults to ./uploads)")
    parser.add_argument("--model", dest="model", default=None, help="OpenAI model used for SQL generation")
    parser.add_argument("--no-llm", dest="use_llm", action="store_false", default=True, help="Use rule-based SQL generation only")
    parser.add_argument("--query", dest="query", default=None, help="Run a single question non-interactively and exit")
    parser.add_argument("--connect", dest="connect", action="store_true", help="Connect to Snowflake (browser SSO) first")
    parser.add_argument("--schema", dest="schema", action="store_true", help="Describe the remote schema and exit")
    parser.add_argument("--health", dest="health", action="store_true", help="Print a liveness check and exit")
    parser.add_argument("--json", dest="json", action="store_true", help="Print results as JSON")
    parser.add_argument("-v", "--verbose", dest="verbose", action="store_true")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    settings = Settings.from_env()
    if args.uploads_dir:
        settings.uploads_dir = args.uploads_dir
    if args.model:
        settings.openai_model = args.model

    assistant = Assistant(settings, translator=DefaultTranslator(settings, use_llm=args.use_llm))
    logger.info("Uploads directory: %s", settings.uploads_dir)
    try:
        code = asyncio.run(_run(args, assistant, console))
    finally:
        assistant.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
