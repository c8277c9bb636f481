"""
Main CLI application for Product Scout.

Provides the command-line interface for:
- Discovering product URLs for one or more storefronts
- Managing configuration
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from product_scout import __version__
from product_scout.config import Settings, load_config
from product_scout.core.exceptions import ConfigurationError
from product_scout.pipeline import DiscoveryResult, load_seed_urls, run_batch
from product_scout.utils.logging import get_logger, reset_logging, setup_logging

app = typer.Typer(
    name="product-scout",
    help="Product Scout - Find product page URLs on e-commerce storefronts",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = get_logger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Product Scout[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Product Scout - Discover product URLs via sitemaps or a headless crawl.

    Use 'product-scout --help' for command list.
    """
    ctx.obj = {"verbose": verbose}
    setup_logging(level="DEBUG" if verbose else "INFO")


@app.command()
def discover(
    ctx: typer.Context,
    urls: Optional[List[str]] = typer.Argument(
        None,
        help="Storefront URLs to discover products for",
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="File with one storefront URL per line",
        exists=True,
        dir_okay=False,
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the <domain>.txt result files",
    ),
    links_limit: Optional[int] = typer.Option(
        None,
        "--links-limit",
        "-n",
        help="Product URLs to collect per storefront during a crawl",
        min=1,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Browser workers per storefront",
        min=1,
        max=64,
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--no-headless",
        help="Run browser in headless mode",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Discover product URLs and write one <domain>.txt per storefront.

    Example:
        product-scout discover https://shop.example.com --links-limit 100
    """
    seeds = list(urls or [])
    if input_file is not None:
        seeds.extend(load_seed_urls(input_file))

    if not seeds:
        console.print("[red]Error:[/red] No storefront URLs given")
        raise typer.Exit(1)

    try:
        settings = load_config(config_file)
    except (ConfigurationError, ValidationError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    _apply_logging_settings(ctx, settings)

    # CLI options override file and environment settings
    if output_dir is not None:
        settings.output.output_dir = output_dir
    if links_limit is not None:
        settings.crawler.links_limit = links_limit
    if workers is not None:
        settings.crawler.workers = workers
    if headless is not None:
        settings.browser.headless = headless

    console.print(Panel(
        f"[bold]Storefronts:[/bold] {len(seeds)}\n"
        f"[dim]Limit: {settings.crawler.links_limit} | "
        f"Workers: {settings.crawler.workers} | "
        f"Output: {settings.output.output_dir}[/dim]",
        title="Product Scout",
        border_style="blue",
    ))

    try:
        results = asyncio.run(run_batch(seeds, settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]Discovery cancelled by user[/yellow]")
        raise typer.Exit(1)

    _print_summary(results)

    if not any(r.ok for r in results):
        raise typer.Exit(1)


def _apply_logging_settings(ctx: typer.Context, settings: Settings) -> None:
    """Reconfigure logging from the loaded settings, keeping --verbose."""
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    reset_logging()
    setup_logging(settings.logging, level="DEBUG" if verbose else None)


def _print_summary(results: list[DiscoveryResult]) -> None:
    """Print a per-storefront summary table."""
    table = Table(title="Discovery Results", show_header=True)
    table.add_column("Domain", style="cyan")
    table.add_column("Source")
    table.add_column("Products", justify="right")
    table.add_column("Output", style="dim")

    for result in results:
        if result.error:
            source = f"[red]error: {result.error}[/red]"
        elif not result.ok:
            source = "[yellow]none[/yellow]"
        else:
            source = result.source

        table.add_row(
            result.domain or result.seed_url,
            source,
            str(len(result.product_urls)),
            str(result.output_path) if result.output_path else "-",
        )

    console.print(table)

    for result in results:
        if not result.ok:
            console.print(
                f"[yellow]No product URLs found for {result.domain or result.seed_url}[/yellow]")


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to show",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Configuration management.

    Examples:
        product-scout config --show
        product-scout config --init --output ./product-scout.yaml
    """
    if init:
        _init_config(output)
    elif show:
        _show_config(config_file)
    else:
        console.print(
            "Use --show to view config or --init to create default config")


def _show_config(config_file: Optional[Path]) -> None:
    """Show the effective configuration."""
    try:
        settings = load_config(config_file)
    except (ConfigurationError, ValidationError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    console.print(Panel(
        "[bold]Current Configuration[/bold]",
        border_style="blue",
    ))

    for section, values in settings.model_dump(mode="json").items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        for key, value in values.items():
            console.print(f"  {key}: [dim]{value}[/dim]")


def _init_config(output: Optional[Path]) -> None:
    """Write the default configuration to a YAML file."""
    output_path = output or Path("product-scout.yaml")

    if output_path.exists():
        if not typer.confirm(f"File {output_path} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output_path, "w") as f:
        yaml.dump(
            Settings().model_dump(mode="json"), f,
            default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output_path}")
