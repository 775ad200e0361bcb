"""
Command-line interface for SEO Meta Generator.

Generates meta titles, descriptions and slugs from a keyword or a URL, and
offers offline fitting and slug helpers.
"""

import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import MetaConfig, ServiceSettings
from .content_sources import ContentExtractionError
from .keyword_deriver import NoKeywordDerivableError
from .llm_client import LLMClientError
from .models import ParsedGeneration
from .pipeline import generate_meta
from .service import InvalidRequestError, MetaService
from .slugs import DEFAULT_SLUG_MAX_LENGTH, slugify

console = Console()


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    SEO Meta Generator - meta titles, descriptions and slugs.

    Examples:

        meta-gen keyword "web hosting" --note "budget plans for small sites"

        meta-gen url https://example.com/page

        meta-gen fit --keyword "seo tool" --title "Our SEO Tool" --description "Short desc."
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj.setdefault("config", MetaConfig())
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_service(config: MetaConfig) -> MetaService:
    settings = ServiceSettings.from_env()
    if not settings.has_any_provider:
        console.print(
            "[red]Error:[/red] No provider configured. Set ANTHROPIC_API_KEY, "
            "GEMINI_API_KEY or OPENROUTER_API_KEY."
        )
        sys.exit(1)
    return MetaService.from_settings(settings, config=config)


def _run(ctx: click.Context, action):
    """Run a generation action, turning domain errors into exit code 1."""
    try:
        return action()
    except InvalidRequestError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
    except ContentExtractionError as e:
        console.print(f"[red]Content extraction error:[/red] {e}")
    except NoKeywordDerivableError as e:
        console.print(f"[red]Keyword error:[/red] {e}")
    except LLMClientError as e:
        console.print(f"[red]LLM error:[/red] {e}")
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if ctx.obj.get("verbose"):
            import traceback
            console.print(traceback.format_exc())
    sys.exit(1)


def _display_result(payload: dict, as_json: bool) -> None:
    """Print a generation payload as JSON or as tables."""
    if as_json:
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    header = f"[bold blue]Main keyword:[/bold blue] {payload['main_keyword']}"
    if payload.get("provider"):
        header += f"\n[dim]Provider: {payload['provider']}"
        if payload.get("fromCache"):
            header += " (cached)"
        header += "[/dim]"
    console.print(Panel.fit(header, border_style="blue"))

    extracted = payload.get("extracted")
    if extracted:
        page_table = Table(title="Extracted Page Fields", show_header=True)
        page_table.add_column("Field", style="cyan")
        page_table.add_column("Value")
        page_table.add_row("Title tag", extracted.get("titleTag", ""))
        page_table.add_row("H1", extracted.get("h1", ""))
        page_table.add_row("Meta description", extracted.get("metaDesc", ""))
        console.print(page_table)

    title_table = Table(title="Meta Titles", show_header=True)
    title_table.add_column("#", style="dim")
    title_table.add_column("Title", style="green")
    title_table.add_column("Chars", style="cyan", justify="right")
    for index, title in enumerate(payload["titles"], start=1):
        title_table.add_row(str(index), title, str(len(title)))
    console.print(title_table)

    meta_table = Table(title="Meta Descriptions", show_header=True)
    meta_table.add_column("#", style="dim")
    meta_table.add_column("Description", style="green")
    meta_table.add_column("Chars", style="cyan", justify="right")
    for index, meta in enumerate(payload["metas"], start=1):
        meta_table.add_row(str(index), meta, str(len(meta)))
    console.print(meta_table)

    console.print(f"\n[cyan]Slug:[/cyan] {payload['slug']}")


@main.command()
@click.argument("keyword")
@click.option("--note", "-n", default="", help="Context for the generator.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of tables.")
@click.pass_context
def keyword(ctx: click.Context, keyword: str, note: str, as_json: bool) -> None:
    """Generate meta for KEYWORD."""
    service = _build_service(ctx.obj["config"])
    with console.status("[bold green]Generating meta..."):
        payload = _run(ctx, lambda: service.from_keyword(keyword, note))
    _display_result(payload, as_json)


@main.command()
@click.argument("url")
@click.option("--keyword", "-k", default=None, help="Main keyword (derived from the page if omitted).")
@click.option("--note", "-n", default="", help="Context for the generator.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of tables.")
@click.pass_context
def url(ctx: click.Context, url: str, keyword: Optional[str], note: str, as_json: bool) -> None:
    """Fetch URL and generate meta for the page."""
    service = _build_service(ctx.obj["config"])
    with console.status("[bold green]Fetching page and generating meta..."):
        payload = _run(ctx, lambda: service.from_url(url, keyword=keyword, note=note))
    _display_result(payload, as_json)


@main.command()
@click.option("--keyword", "-k", default=None, help="Main keyword (derived from --source-* if omitted).")
@click.option("--title", "-t", "titles", multiple=True, help="Title candidate (repeatable).")
@click.option("--description", "-d", "descriptions", multiple=True, help="Description candidate (repeatable).")
@click.option("--source-title", default=None, help="Page title tag, used for keyword derivation and templates.")
@click.option("--source-h1", default=None, help="Page H1.")
@click.option("--source-description", default=None, help="Page meta description.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of tables.")
@click.pass_context
def fit(
    ctx: click.Context,
    keyword: Optional[str],
    titles: tuple[str, ...],
    descriptions: tuple[str, ...],
    source_title: Optional[str],
    source_h1: Optional[str],
    source_description: Optional[str],
    as_json: bool,
) -> None:
    """Fit candidates to length and keyword rules without calling a provider."""
    generation = ParsedGeneration(titles=list(titles), metas=list(descriptions), is_structured=True)
    result = _run(
        ctx,
        lambda: generate_meta(
            keyword,
            title_source=source_title,
            heading_source=source_h1,
            description_source_text=source_description,
            generation=generation,
            config=ctx.obj["config"],
        ),
    )
    _display_result(result.to_dict(), as_json)


@main.command()
@click.argument("text")
@click.option(
    "--max-length",
    type=int,
    default=DEFAULT_SLUG_MAX_LENGTH,
    help=f"Maximum slug length (default: {DEFAULT_SLUG_MAX_LENGTH}).",
)
def slug(text: str, max_length: int) -> None:
    """Print the URL slug for TEXT."""
    click.echo(slugify(text, max_length))


def run_cli() -> None:
    """Entry point for the CLI."""
    main(obj={})


if __name__ == "__main__":
    run_cli()
