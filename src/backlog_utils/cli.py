"""CLI interface for Backlog utilities"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import click

from backlog_utils import __version__
from backlog_utils.application.wiki_service import WikiService
from backlog_utils.infrastructure.backlog.wiki_client import WikiClient
from backlog_utils.infrastructure.config.config_manager import ConfigManager
from backlog_utils.infrastructure.http_client import client_settings_from_config

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

QUIET_LOGGERS = ("urllib3",)


def setup_logging(level: str = "info") -> int:
    """Setup logging configuration

    Args:
        level: Level name (debug, info, warn, error); unknown names mean info

    Returns:
        Numeric level that was applied
    """
    numeric_level = LOG_LEVELS.get((level or "").strip().lower(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(numeric_level)
    for logger_name in logging.Logger.manager.loggerDict:
        logging.getLogger(logger_name).setLevel(numeric_level)
    # urllib3 logs full request lines, and the query carries the API key
    quiet_level = max(numeric_level, logging.WARNING)
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
        for child_name in list(logging.Logger.manager.loggerDict):
            if child_name.startswith(f"{logger_name}."):
                logging.getLogger(child_name).setLevel(quiet_level)
    return numeric_level


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def parse_pairs(values: Iterable[str]) -> List[str]:
    """Flatten repeated, comma separated --pairs values into old/new items"""
    items: List[str] = []
    for value in values:
        items.extend(value.split(","))
    return items


def _create_wiki_client(ctx: click.Context, base_url: Optional[str], api_key: Optional[str]) -> WikiClient:
    """Create wiki client from config, with CLI flags taking precedence

    Args:
        ctx: Click context holding the config path
        base_url: --base-url override
        api_key: --api-key override

    Returns:
        WikiClient instance
    """
    config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    settings = client_settings_from_config(
        config_manager.get_backlog_config(),
        config_manager.get_retry_config(),
        base_url=base_url,
        api_key=api_key,
    )
    logger.debug(
        f"Using {settings.base_url} (max retry attempts: {settings.max_retry_attempts}, "
        f"max jitter: {settings.max_jitter_ms}ms)"
    )
    return WikiClient.from_settings(settings)


def connection_options(func):
    """Add --base-url and --api-key options to a command"""
    func = click.option(
        "--api-key",
        type=str,
        help="Backlog API key (default: from BACKLOG_API_KEY env or config)",
    )(func)
    func = click.option(
        "--base-url",
        type=str,
        help="Backlog space URL (default: from BACKLOG_URL env or config)",
    )(func)
    return func


def _run(ctx: click.Context, action) -> None:
    """Run a command body, converting failures into a ClickException"""
    verbose = ctx.obj.get("verbose", False)
    logger.info("started")
    try:
        action()
    except click.ClickException:
        raise
    except Exception as e:
        _die(str(e), verbose=verbose, exc=e)
    logger.info("stopped")


@click.group()
@click.option(
    "--log-level",
    type=str,
    default="info",
    show_default=True,
    envvar="BACKLOG_LOG_LEVEL",
    help="Log level: debug, info, warn, error",
)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .backlog.yml config file",
)
@click.version_option(__version__, prog_name="bkl")
@click.pass_context
def cli(ctx, log_level: str, config: Path):
    """Backlog utilities - a CLI for the Backlog API"""
    ctx.ensure_object(dict)
    level = setup_logging(log_level)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = level <= logging.DEBUG


@cli.group()
def wiki():
    """Backlog wiki utilities"""


@wiki.command("list")
@connection_options
@click.option("--project-key", required=True, type=str, help="Backlog project key")
@click.option("--pattern", type=str, help="Regular expression the page name must match")
@click.pass_context
def list_wiki(ctx, base_url: str, api_key: str, project_key: str, pattern: str):
    """List wiki pages with optional pattern"""

    def action():
        with _create_wiki_client(ctx, base_url, api_key) as client:
            for page in client.list(project_key, pattern):
                click.echo(page.to_json())

    _run(ctx, action)


@wiki.command("get")
@connection_options
@click.option("--wiki-id", required=True, type=int, help="Backlog wiki page ID")
@click.pass_context
def get_wiki(ctx, base_url: str, api_key: str, wiki_id: int):
    """Show a wiki page including its content"""

    def action():
        with _create_wiki_client(ctx, base_url, api_key) as client:
            click.echo(client.get(wiki_id).to_json())

    _run(ctx, action)


@wiki.command("rename")
@connection_options
@click.option("--wiki-id", required=True, type=int, help="Backlog wiki page ID")
@click.option("--old", required=True, type=str, help="String to be replaced in the page name")
@click.option("--new", required=True, type=str, help="Replacement string")
@click.pass_context
def rename_wiki(ctx, base_url: str, api_key: str, wiki_id: int, old: str, new: str):
    """Rename wiki page"""

    def action():
        with _create_wiki_client(ctx, base_url, api_key) as client:
            page = client.get(wiki_id)
            new_name = client.rename(page, old, new)
        click.echo(f"updated: {page.name} => {new_name}")

    _run(ctx, action)


@wiki.command("replace")
@connection_options
@click.option("--wiki-id", required=True, type=int, help="Backlog wiki page ID")
@click.option(
    "--pairs",
    required=True,
    multiple=True,
    help="Old and new strings, comma separated (repeatable): --pairs old1,new1,old2,new2",
)
@click.pass_context
def replace_wiki(ctx, base_url: str, api_key: str, wiki_id: int, pairs: tuple):
    """Replace strings in the content of wiki page"""

    def action():
        with _create_wiki_client(ctx, base_url, api_key) as client:
            page = client.get(wiki_id)
            client.replace(page, parse_pairs(pairs))
        click.echo(f"updated: {page.id}: {page.name}")

    _run(ctx, action)


@wiki.command("rename-all")
@connection_options
@click.option("--project-key", required=True, type=str, help="Backlog project key")
@click.option("--pattern", type=str, help="Regular expression the page name must match")
@click.option("--old", required=True, type=str, help="String to be replaced in the page names")
@click.option("--new", required=True, type=str, help="Replacement string")
@click.pass_context
def rename_wiki_all(
    ctx, base_url: str, api_key: str, project_key: str, pattern: str, old: str, new: str
):
    """List wiki pages and rename them with optional pattern"""

    def action():
        with _create_wiki_client(ctx, base_url, api_key) as client:
            results = WikiService(client).rename_all(project_key, pattern, old, new)
        for result in results:
            click.echo(f"updated: {result.old_name} => {result.new_name}")

    _run(ctx, action)


@wiki.command("replace-all")
@connection_options
@click.option("--project-key", required=True, type=str, help="Backlog project key")
@click.option("--pattern", type=str, help="Regular expression the page name must match")
@click.option(
    "--pairs",
    required=True,
    multiple=True,
    help="Old and new strings, comma separated (repeatable): --pairs old1,new1,old2,new2",
)
@click.pass_context
def replace_wiki_all(
    ctx, base_url: str, api_key: str, project_key: str, pattern: str, pairs: tuple
):
    """List wiki pages and replace strings in the content with optional pattern"""

    def action():
        with _create_wiki_client(ctx, base_url, api_key) as client:
            updated = WikiService(client).replace_all(project_key, pattern, parse_pairs(pairs))
        for page in updated:
            click.echo(f"updated: {page.id}: {page.name}")

    _run(ctx, action)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
