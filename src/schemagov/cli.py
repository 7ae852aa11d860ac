"""Command line interface for :mod:`schemagov`."""

import json
import logging
import sys

import click

from .backend.config import Config
from .backend.services.tool_service import ToolService, build_usage_log
from .operations import Toolkit
from .sparql_helper import SparqlHelper

__all__ = [
    "main",
]


def _parse_arg(raw: str) -> tuple[str, object]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected KEY=VALUE, got {raw!r}", param_hint="--arg")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--endpoint", default=None, help="SPARQL endpoint URL")
@click.option("--log-file", default=None, help="Usage log path (JSON lines)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, endpoint: str, log_file: str) -> None:
    r"""schemagov - SPARQL tool catalogue for schema.gov.it.

    Run catalogue operations, inspect the usage log, or host the tools
    over HTTP or MCP.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["endpoint"] = endpoint or Config.SPARQL_ENDPOINT
    ctx.obj["log_file"] = log_file or Config.USAGE_LOG_PATH

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("schemagov").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s", force=True)


def _service(ctx: click.Context) -> ToolService:
    helper = SparqlHelper(
        ctx.obj["endpoint"],
        timeout=Config.SPARQL_TIMEOUT,
        fetch_timeout=Config.PREVIEW_TIMEOUT,
    )
    return ToolService(Toolkit(helper, build_usage_log(ctx.obj["log_file"])))


def _emit(service: ToolService, name: str, args: dict) -> None:
    result = service.invoke(name, args)
    if result.is_error:
        click.echo(result.text, err=True)
        sys.exit(1)
    click.echo(result.text)


@main.command("tools")
@click.pass_context
def list_tools(ctx: click.Context) -> None:
    """List the available operations."""
    for op in _service(ctx).catalogue():
        click.echo(f"{op['name']:<24} {op['description']}")


@main.command()
@click.argument("name")
@click.option("--arg", "-a", "args", multiple=True, help="Operation argument as KEY=VALUE")
@click.pass_context
def run(ctx: click.Context, name: str, args: tuple[str, ...]) -> None:
    """Invoke operation NAME once and print its output.

    Values are parsed as JSON when possible, so numbers stay numbers.


    Example:
      schemagov run search_concepts -a keyword=amministrazione -a limit=5
    """
    _emit(_service(ctx), name, dict(_parse_arg(a) for a in args))


@main.command()
@click.argument("query_file", type=click.File("r"))
@click.pass_context
def query(ctx: click.Context, query_file) -> None:
    """Run the raw SPARQL query in QUERY_FILE ("-" for stdin)."""
    _emit(_service(ctx), "query_sparql", {"query": query_file.read()})


@main.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Summarise the usage log."""
    _emit(_service(ctx), "analyze_usage", {})


@main.command()
@click.pass_context
def suggest(ctx: click.Context) -> None:
    """Suggest new operations from frequent raw queries."""
    _emit(_service(ctx), "suggest_new_tools", {})


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=5000, type=int, help="Port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Serve the tools over HTTP (Flask)."""
    from .backend.app import create_app

    app = create_app(Config, service=_service(ctx))
    app.run(host=host, port=port, debug=Config.DEBUG)


@main.command("mcp")
@click.pass_context
def mcp_stdio(ctx: click.Context) -> None:
    """Serve the tools over MCP on stdio."""
    from . import mcp_server

    mcp_server.set_service(_service(ctx))
    mcp_server.main()


if __name__ == "__main__":
    main()
