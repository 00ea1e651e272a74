"""Rich renderings of the dashboard for terminal previews."""

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from healthtrack.domain.models import RiskLevel
from healthtrack.services.dashboard import DashboardView
from healthtrack.services.stats import StatsInsights

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}


def render_records_table(view: DashboardView) -> Table:
    """One row per visible record card."""
    page = view.page_info
    table = Table(
        title=f"Health Records (page {page.current_page} of {page.total_pages})",
        caption=view.summary,
    )
    table.add_column("Name", style="bold")
    table.add_column("Age", justify="right")
    table.add_column("BMI", justify="right")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Risk")
    table.add_column("Recommendations")
    table.add_column("Created")

    for card in view.cards:
        record = card.record
        level = card.risk.level
        risk = Text(f"{level.value} ({card.risk.score})", style=RISK_STYLES[level])
        table.add_row(
            record.name or "-",
            str(record.age) if record.age is not None else "-",
            f"{card.bmi.value:.2f}" if card.bmi.value is not None else "-",
            card.bmi.category or "-",
            f"{record.health_score:g}" if record.health_score is not None else "-",
            risk,
            " ".join(recommendation.icon for recommendation in card.recommendations) or "-",
            card.created_label,
        )
    return table


def render_stats_panel(insights: StatsInsights) -> Panel:
    lines = [
        Text(f"Total Records: {insights.total_records}"),
        Text(
            f"Average Health Score: {insights.average_score} "
            f"(range {insights.min_score:g} - {insights.max_score:g})"
        ),
        Text(
            "BMI: "
            + ", ".join(f"{s.label} {s.count} ({s.percent}%)" for s in insights.bmi_shares)
        ),
        Text("Age: " + ", ".join(f"{s.label} {s.count}" for s in insights.age_shares)),
        Text(
            "Gender: " + ", ".join(f"{s.label} {s.percent}%" for s in insights.gender_shares)
        ),
        Text(f"{insights.normal_bmi_percent}% of users have a normal BMI"),
    ]
    if insights.above_normal_alert:
        lines.append(
            Text(f"{insights.above_normal_percent}% of users are above normal weight", style="red")
        )
    if insights.score_verdict is not None:
        lines.append(Text(f"Average health score is {insights.score_verdict}"))
    lines.append(Text(insights.tracking_message, style="dim"))

    return Panel(Group(*lines), title="Health Statistics", style="blue")
