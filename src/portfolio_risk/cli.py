import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from portfolio_risk.analysis.portfolio import summarize, total_value
from portfolio_risk.config import PathSelection, RiskConfig
from portfolio_risk.data.holdings_loader import load_history, load_holdings
from portfolio_risk.data.providers import HistoryProvider
from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import MetricsPath, PortfolioHistory
from portfolio_risk.output.renderer import RiskReportRenderer

logger = logging.getLogger(__name__)
console = Console()


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("holdings", type=Path, help="CSV file of holdings")
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_history(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--returns",
        type=Path,
        default=None,
        help="CSV file of daily portfolio returns (optional benchmark column)",
    )
    p.add_argument(
        "--fetch",
        action="store_true",
        help="Fetch price history from Yahoo Finance (holding names as tickers)",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="portfolio-risk",
        description="Portfolio return and risk analytics",
    )
    sub = p.add_subparsers(dest="command")

    summary = sub.add_parser("summary", help="Show portfolio value and ROI")
    _add_common(summary)

    metrics = sub.add_parser("metrics", help="Compute risk metrics")
    _add_common(metrics)
    _add_history(metrics)
    metrics.add_argument(
        "--path",
        choices=[s.value for s in PathSelection],
        default=None,
        help="Force the historical or heuristic computation path",
    )

    var = sub.add_parser("var", help="Compute Value at Risk")
    _add_common(var)
    _add_history(var)
    var.add_argument(
        "--confidence",
        type=float,
        default=None,
        help="Confidence level, e.g. 0.95",
    )
    var.add_argument(
        "--horizon",
        type=int,
        default=None,
        help="Time horizon in trading days",
    )
    var.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the Monte Carlo simulation",
    )

    return p


def _read_holdings(path: Path) -> list[Holding]:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        sys.exit(1)
    holdings = load_holdings(path)
    if not holdings:
        console.print(f"[yellow]No holdings parsed from {path}[/yellow]")
    return holdings


def _load_history(
    args: argparse.Namespace,
    holdings: list[Holding],
    provider: HistoryProvider | None = None,
) -> PortfolioHistory | None:
    if args.returns is not None:
        return load_history(args.returns, total_value(holdings) or 1.0)
    if provider is not None:
        with console.status("[cyan]Fetching price history..."):
            return provider.get_history(holdings)
    return None


def _provider(args: argparse.Namespace, config: RiskConfig) -> HistoryProvider | None:
    if not args.fetch:
        return None
    from portfolio_risk.data.market_data import MarketHistoryProvider

    return MarketHistoryProvider(config)


def _run_summary(args: argparse.Namespace) -> None:
    holdings = _read_holdings(args.holdings)
    summary = summarize(holdings)
    renderer = RiskReportRenderer(console)
    renderer.render_header("Portfolio Summary", summary)
    renderer.render_summary(summary)


def _run_metrics(args: argparse.Namespace) -> None:
    from portfolio_risk.analysis.risk import RiskMetricsEngine

    config = RiskConfig.from_env(metrics_path=args.path)
    holdings = _read_holdings(args.holdings)
    history = _load_history(args, holdings, _provider(args, config))

    engine = RiskMetricsEngine(config)
    with console.status("[cyan]Computing risk metrics..."):
        metrics = engine.comprehensive(holdings, history)

    renderer = RiskReportRenderer(console)
    renderer.render_header("Risk Metrics", summarize(holdings))
    renderer.render_metrics(metrics)
    if metrics.path == MetricsPath.HEURISTIC:
        console.print("[dim]Estimated from asset-class heuristics.[/dim]")


def _run_var(args: argparse.Namespace) -> None:
    from portfolio_risk.analysis.var import VaREngine

    config = RiskConfig.from_env(
        confidence_level=args.confidence,
        time_horizon_days=args.horizon,
        seed=args.seed,
    )
    holdings = _read_holdings(args.holdings)
    provider = _provider(args, config)
    history = _load_history(args, holdings, provider)

    engine = VaREngine(config, estimator=provider)
    with console.status("[cyan]Running VaR simulations..."):
        result = engine.calculate(holdings, history.returns if history else ())

    renderer = RiskReportRenderer(console)
    renderer.render_header("Value at Risk", summarize(holdings))
    renderer.render_var(result)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        if args.command == "summary":
            _run_summary(args)
        elif args.command == "metrics":
            _run_metrics(args)
        elif args.command == "var":
            _run_var(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
