"""
Dashboard walkthrough against the in-memory record source.

This script shows:
1. Configuration loading and validation
2. Loading records and statistics
3. Search, sort and pagination
4. Deleting a record and the page staying in range

Run with: uv run python demo.py
"""

import asyncio

from rich.console import Console
from rich.panel import Panel

from adapters.memory import InMemoryRecordSource, sample_records
from healthtrack.config import get_config, print_config_summary, validate_config
from healthtrack.console import render_records_table, render_stats_panel
from healthtrack.services import DashboardService, configure_logging

console = Console()


async def main() -> None:
    validate_config()
    print_config_summary()
    config = get_config()
    configure_logging(config.logging)

    source = InMemoryRecordSource("demo", sample_records())
    dashboard = DashboardService(source, config)
    await dashboard.load()

    view = dashboard.view()
    if view.insights is not None:
        console.print(render_stats_panel(view.insights))
    console.print(render_records_table(view))

    console.print(Panel("🔎 Searching for 'overweight'", style="blue"))
    dashboard.search("overweight")
    console.print(render_records_table(dashboard.view()))

    console.print(Panel("↕️  Sorting by BMI", style="blue"))
    dashboard.clear_search()
    dashboard.sort("bmi")
    console.print(render_records_table(dashboard.view()))

    console.print(Panel("🗑️  Deleting the last record on page 2", style="blue"))
    dashboard.go_to_page(2)
    last_on_page = dashboard.view().cards[-1].record
    if last_on_page.record_id is not None:
        await dashboard.delete_record(last_on_page.record_id)
    console.print(render_records_table(dashboard.view()))


if __name__ == "__main__":
    asyncio.run(main())
