#!/usr/bin/env python3
"""Takeoff Review CLI - runs the three-pass review over a takeoff file.

Usage:
    # Review a takeoff against its plan pages
    python main.py --takeoff ./takeoff.json --plan ./page1.png --plan ./page2.png

    # Use a cost-code reference fragment and save the result
    python main.py --takeoff ./takeoff.json --plan ./page1.png \
        --cost-codes ./csi16.txt --standard csi-16 --output ./review.json
"""

import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from agents import CancellationToken
from config import COST_CODE_STANDARD_NAMES, settings
from contracts import CostCodeReference, PassStatus, ReviewOrchestratorResult
from orchestrator import run_review
from providers.router import get_tier_model_list


console = Console()

STATUS_STYLE = {
    PassStatus.OK: "green",
    PassStatus.SKIPPED: "dim",
    PassStatus.CANCELLED: "yellow",
}


def read_takeoff_items(takeoff_path: str) -> list:
    """Load takeoff items from a JSON file: a list, or an object with an `items` list."""
    data = json.loads(Path(takeoff_path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise click.BadParameter("takeoff JSON must be a list of items or contain an 'items' list")
    return data


def to_image_handle(plan: str) -> str:
    """Pass URLs through; encode local image files as data URLs."""
    if plan.startswith(("http://", "https://", "data:")):
        return plan
    path = Path(plan)
    if not path.is_file():
        raise click.BadParameter(f"plan image not found: {plan}")
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def print_summary(result: ReviewOrchestratorResult) -> None:
    """Render the review result to the console."""
    status_table = Table(title="Reviewer passes")
    status_table.add_column("Pass")
    status_table.add_column("Status")
    status_table.add_column("Tokens (in/out)", justify="right")
    status_table.add_column("Notes")
    notes = {
        "item_auditor": result.review_result.summary.notes,
        "plan_rescanner": result.reanalysis_result.summary.notes,
        "quantity_validator": result.validation_result.summary.notes,
    }
    for name, status in result.pass_status.items():
        usage = result.usage.get(name)
        style = STATUS_STYLE.get(status, "red")
        tokens = f"{usage.input_tokens:,}/{usage.output_tokens:,}" if usage else "-"
        status_table.add_row(name, f"[{style}]{status.value}[/{style}]", tokens, notes.get(name, ""))
    console.print(status_table)

    if result.merged_missing_items:
        missing_table = Table(title=f"Missing items ({len(result.merged_missing_items)})")
        missing_table.add_column("Name")
        missing_table.add_column("Category")
        missing_table.add_column("Impact")
        missing_table.add_column("Source")
        missing_table.add_column("Cost code")
        for item in result.merged_missing_items:
            missing_table.add_row(item.name, item.category, item.impact.value, item.source.value, item.cost_code)
        console.print(missing_table)

    summary = result.missing_information_summary
    console.print(f"\n[bold]Missing information:[/bold] {summary.total_missing} entries "
                  f"across {summary.items_affected} items")
    for impact, count in summary.by_impact.items():
        if count:
            console.print(f"  {impact:10} {count}")

    total_cost = sum(u.total_cost for u in result.usage.values())
    console.print(f"\n[dim]Estimated cost:[/dim] ${total_cost:.4f}")


@click.command()
@click.option(
    "--takeoff", "-t", "takeoff_path",
    required=False,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the takeoff JSON (list of items or {\"items\": [...]})"
)
@click.option(
    "--plan", "-p", "plans",
    multiple=True,
    help="Plan page image file or URL; repeat for each page"
)
@click.option(
    "--cost-codes", "-c", "cost_codes_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Text file with the cost-code reference fragment for the prompts"
)
@click.option(
    "--standard", "-s",
    type=click.Choice(sorted(COST_CODE_STANDARD_NAMES)),
    default=None,
    help=f"Cost-code standard (default: {settings.default_cost_code_standard})"
)
@click.option(
    "--context",
    default=None,
    help="Identifier for this review (job or takeoff id), used in prompts and logs"
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Overall deadline in seconds; unfinished passes are reported as cancelled"
)
@click.option(
    "--output", "-o", "output_path",
    default=None,
    help="Write the full result as JSON to this path"
)
@click.option(
    "--list-providers",
    is_flag=True,
    help="List models available to the reviewer tiers and exit"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Verbose output"
)
def main(
    takeoff_path: Optional[str],
    plans: Tuple[str, ...],
    cost_codes_path: Optional[str],
    standard: Optional[str],
    context: Optional[str],
    timeout: Optional[float],
    output_path: Optional[str],
    list_providers: bool,
    verbose: bool,
):
    """Takeoff Review: multi-pass AI review of a construction quantity takeoff.

    Audits the existing items, re-scans the plans for missed items, validates
    quantities, and reports merged missing items and missing information.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=verbose)],
    )
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    if list_providers:
        console.print("[bold]Reviewer tier models:[/bold]\n")
        available = get_tier_model_list()
        for entry in available:
            console.print(f"  {entry['model_name']:14} {entry['litellm_params']['model']}")
        if not available:
            console.print("  [red]No API keys set[/red]")
        console.print("\n[dim]Set API keys via environment variables:[/dim]")
        console.print("  OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_API_KEY")
        return

    if not takeoff_path:
        console.print("[red]Error: --takeoff is required[/red]")
        sys.exit(1)

    console.print(Panel.fit(
        "[bold blue]Takeoff Review[/bold blue]\n"
        "[dim]Item audit, plan rescan, quantity validation[/dim]",
        border_style="blue"
    ))

    items = read_takeoff_items(takeoff_path)
    images = [to_image_handle(plan) for plan in plans]
    cost_codes = CostCodeReference(
        standard=standard or settings.default_cost_code_standard,
        reference_text=Path(cost_codes_path).read_text(encoding="utf-8") if cost_codes_path else "",
    )

    console.print(f"\n[dim]Items:[/dim] {len(items)}")
    console.print(f"[dim]Plan pages:[/dim] {len(images)}")
    console.print(f"[dim]Cost codes:[/dim] {cost_codes.standard_name}")

    cancel = CancellationToken(timeout=timeout)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Reviewing takeoff...", total=None)
        result = run_review(
            items,
            plan_images=images,
            cost_codes=cost_codes,
            context=context,
            cancel=cancel,
        )
        progress.update(task, completed=True)

    console.print("\n" + "=" * 60)
    print_summary(result)

    if output_path:
        Path(output_path).write_text(
            result.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
        )
        console.print(f"\n[bold]Result saved to:[/bold] {output_path}")

    console.print("\n" + "=" * 60)

    if result.degraded:
        sys.exit(2)


if __name__ == "__main__":
    main()
