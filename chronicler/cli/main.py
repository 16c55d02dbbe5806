"""CLI interface for Chronicler"""

import asyncio
import logging
import os
import yaml
from pathlib import Path
from typing import List, Optional
import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from chronicler.llm import ChatCompletionsClient, StructuredPromptSubmitter
from chronicler.models import TimelineSeed
from chronicler.normalizer import slugify
from chronicler.orchestrator import BatchResult, PhaseOrchestrator


console = Console()


def load_config(path: Optional[Path] = None) -> dict:
    """Load configuration from config.yaml"""
    config_path = path or Path(__file__).parent.parent.parent / "config" / "config.yaml"
    if not config_path.exists():
        console.print(f"[yellow]Warning: Config file not found at {config_path}[/yellow]")
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def configure_logging(config: dict):
    """Route logging through rich at the configured level"""
    level = (config.get("logging", {}) or {}).get("level", "INFO")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)]
    )


def create_submitter(config: dict) -> StructuredPromptSubmitter:
    """Create the prompt submitter from config"""
    llm_config = config.get("llm", {}) or {}
    api_key_env = llm_config.get("api_key_env", "OPENAI_API_KEY")
    provider = ChatCompletionsClient(
        model=llm_config.get("model", "gpt-4o"),
        base_url=llm_config.get("base_url", "https://api.openai.com/v1"),
        api_key=os.environ.get(api_key_env),
        timeout=llm_config.get("timeout", 300),
        json_mode=llm_config.get("json_mode", False)
    )
    return StructuredPromptSubmitter(provider, temperature=llm_config.get("temperature", 0.7))


def load_seeds(path: Path) -> List[TimelineSeed]:
    """Load seeds from a YAML list of {title, start_year, end_year, region, background}"""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("seeds", [])

    return [TimelineSeed(**item) for item in data]


async def generate_timelines(seeds: List[TimelineSeed], config: dict, concurrency: Optional[int]) -> List[BatchResult]:
    """Generate timelines for all seeds"""
    submitter = create_submitter(config)
    orchestrator = PhaseOrchestrator(submitter=submitter, config=config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        task = progress.add_task(f"Generating {len(seeds)} timeline(s)...", total=len(seeds))

        def on_progress(completed: int, total: int, outcome: BatchResult):
            status = "done" if outcome.success else "failed"
            progress.update(
                task,
                advance=1,
                description=f"[{completed}/{total}] {outcome.seed.title}: {status}"
            )

        try:
            return await orchestrator.run_batch(seeds, concurrency=concurrency, on_progress=on_progress)
        finally:
            # Close LLM provider session
            await submitter.close()


def write_results(results: List[BatchResult], output: Path) -> List[Path]:
    """Write each successful result as JSON"""
    output.mkdir(parents=True, exist_ok=True)
    paths = []

    for outcome in results:
        if not outcome.success:
            continue
        path = output / f"{slugify(outcome.seed.title) or 'timeline'}.json"
        path.write_text(outcome.result.model_dump_json(indent=2), encoding="utf-8")
        paths.append(path)

    return paths


@click.command()
@click.option("--title", type=str, help="Timeline topic")
@click.option("--start-year", type=int, help="First year covered (negative for BCE)")
@click.option("--end-year", type=int, help="Last year covered (negative for BCE)")
@click.option("--region", type=str, help="Geographic region")
@click.option("--background", type=str, help="Free-text background context")
@click.option(
    "--seeds",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file with a list of seeds to generate in batch"
)
@click.option("--concurrency", type=int, help="Parallel seeds in a batch run")
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=Path("output"),
    help="Output directory for generated timelines"
)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to config file"
)
def main(
    title: Optional[str],
    start_year: Optional[int],
    end_year: Optional[int],
    region: Optional[str],
    background: Optional[str],
    seeds: Optional[Path],
    concurrency: Optional[int],
    output: Path,
    config: Optional[Path]
):
    """Chronicler - Historical Timeline Generator"""

    app_config = load_config(config)
    configure_logging(app_config)

    if seeds:
        seed_list = load_seeds(seeds)
    elif title and start_year is not None and end_year is not None:
        seed_list = [TimelineSeed(
            title=title,
            start_year=start_year,
            end_year=end_year,
            region=region,
            background=background
        )]
    else:
        raise click.UsageError("Provide --seeds or --title with --start-year and --end-year")

    if not seed_list:
        console.print("[yellow]No seeds to generate[/yellow]")
        return

    console.print(Panel(
        "\n".join(f"[bold]{seed.title}[/bold] ({seed.start_year} to {seed.end_year})" for seed in seed_list),
        title="Timelines",
        border_style="blue"
    ))

    results = asyncio.run(generate_timelines(seed_list, app_config, concurrency))
    paths = write_results(results, output)

    # Display summary table
    table = Table(title="Generation Summary")
    table.add_column("Timeline", style="cyan")
    table.add_column("Status")
    table.add_column("Events", justify="right")
    table.add_column("Links", justify="right")
    table.add_column("Dropped relationships", justify="right")

    for outcome in results:
        if outcome.success:
            result = outcome.result
            link_report = result.context.link_report
            table.add_row(
                outcome.seed.title,
                "[green]✓[/green]",
                str(len(result.context.expanded_events or [])),
                f"{link_report.valid_count}/{link_report.valid_count + link_report.rejected_count}" if link_report else "-",
                str(result.bindings.stats.relationships_dropped)
            )
        else:
            table.add_row(outcome.seed.title, f"[red]✗ {outcome.error}[/red]", "-", "-", "-")

    console.print()
    console.print(table)

    if paths:
        console.print(f"\nSaved to: [cyan]{output}[/cyan]")

    if any(not outcome.success for outcome in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
