from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from portfolio_risk.models.portfolio import PortfolioSummary
from portfolio_risk.models.risk import RiskMetrics, VaRResult
from portfolio_risk.output.formatters import (
    fmt_fraction_pct,
    fmt_number,
    fmt_pct,
    fmt_price,
    risk_level_color,
)


class RiskReportRenderer:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_header(self, title: str, summary: PortfolioSummary) -> None:
        self.console.print()
        self.console.print(
            Panel(
                f"[bold]{summary.asset_count} holdings[/bold]  —  "
                f"{fmt_price(summary.total_value)}",
                title=title,
                style="cyan",
            )
        )

    def render_summary(self, summary: PortfolioSummary) -> None:
        table = Table(title="Holdings", show_header=True)
        table.add_column("Asset", style="cyan")
        table.add_column("Value", justify="right")
        table.add_column("ROI", justify="right")
        for a in summary.assets:
            table.add_row(a.name, fmt_price(a.current_value), fmt_pct(a.roi_percent))
        table.add_row(
            Text("Total", style="bold"),
            fmt_price(summary.total_value),
            fmt_pct(summary.average_roi_percent),
        )
        self.console.print(table)

    def render_metrics(self, metrics: RiskMetrics) -> None:
        source = metrics.path.value if metrics.path else "default"
        table = Table(title=f"Risk Metrics ({source})", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        rows = [
            ("ROI", fmt_fraction_pct(metrics.roi), "Sharpe", fmt_number(metrics.sharpe_ratio)),
            (
                "Volatility",
                fmt_fraction_pct(metrics.volatility),
                "Beta",
                fmt_number(metrics.beta),
            ),
            (
                "Max Drawdown",
                fmt_fraction_pct(metrics.max_drawdown),
                "Diversification",
                fmt_number(metrics.diversification_score, 0),
            ),
        ]
        for r in rows:
            table.add_row(*r)
        self.console.print(table)
        if metrics.is_default:
            self.console.print(
                "[yellow]Metrics could not be computed; neutral defaults shown.[/yellow]"
            )

    def render_var(self, result: VaRResult) -> None:
        s = result.summary()
        v = s["var_results"]
        table = Table(
            title=(
                f"Value at Risk ({result.confidence_level:.1%}, "
                f"{result.time_horizon_days}d)"
            ),
            show_header=True,
        )
        table.add_column("Method", style="cyan")
        table.add_column("VaR", justify="right")
        table.add_column("% of Value", justify="right")
        table.add_row(
            "Historical", fmt_price(result.historical_var), fmt_number(v["historical_var_pct"])
        )
        table.add_row(
            "Parametric", fmt_price(result.parametric_var), fmt_number(v["parametric_var_pct"])
        )
        table.add_row(
            "Monte Carlo",
            fmt_price(result.monte_carlo_var),
            fmt_number(v["monte_carlo_var_pct"]),
        )
        table.add_row("Conditional (ES)", fmt_price(result.conditional_var), "")
        self.console.print(table)

        stats = Table(title="Return Distribution", show_header=True)
        stats.add_column("Metric", style="cyan")
        stats.add_column("Value", justify="right")
        stats.add_row("Volatility", fmt_number(result.volatility, 4))
        stats.add_row("Skewness", fmt_number(result.skewness, 4))
        stats.add_row("Kurtosis", fmt_number(result.kurtosis, 4))
        stats.add_row("Expected Return", fmt_number(result.expected_return, 4))
        for name, w in sorted(result.asset_weights.items(), key=lambda x: -x[1]):
            stats.add_row(f"Weight: {name}", fmt_fraction_pct(w))
        self.console.print(stats)

        level = result.risk_level
        self.console.print(
            Panel(
                Text(f"Risk level: {level}", style=risk_level_color(level)),
                style=risk_level_color(level),
            )
        )
