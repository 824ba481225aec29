import asyncio
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from portfolio_risk.analysis.portfolio import (
    asset_metrics,
    summarize_metrics,
)
from portfolio_risk.analysis.risk import RiskMetricsEngine
from portfolio_risk.analysis.var import VaREngine
from portfolio_risk.config import RiskConfig
from portfolio_risk.models.portfolio import Holding, PortfolioSummary
from portfolio_risk.models.risk import PortfolioHistory, RiskMetrics, VaRResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class RiskWorkerPool:
    """Thread pool for mapping pure calculations over independent inputs."""

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    def from_config(cls, config: RiskConfig) -> "RiskWorkerPool":
        return cls(max_workers=config.max_workers)

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="risk",
            )
        return self._executor

    async def map(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        loop = asyncio.get_running_loop()
        return list(
            await asyncio.gather(
                *[loop.run_in_executor(self.executor, fn, item) for item in items]
            )
        )

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "RiskWorkerPool":
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()


class BatchRiskRunner:
    def __init__(
        self,
        pool: RiskWorkerPool,
        metrics_engine: RiskMetricsEngine | None = None,
        var_engine: VaREngine | None = None,
    ) -> None:
        self.pool = pool
        self.metrics_engine = metrics_engine or RiskMetricsEngine()
        self.var_engine = var_engine or VaREngine(self.metrics_engine.config)

    async def summarize(self, holdings: Sequence[Holding]) -> PortfolioSummary:
        metrics = await self.pool.map(asset_metrics, list(holdings))
        return summarize_metrics(metrics)

    async def summarize_many(
        self, portfolios: Sequence[Sequence[Holding]]
    ) -> list[PortfolioSummary]:
        return list(await asyncio.gather(*[self.summarize(p) for p in portfolios]))

    async def metrics_many(
        self,
        portfolios: Sequence[Sequence[Holding]],
        histories: Sequence[PortfolioHistory | None] | None = None,
    ) -> list[RiskMetrics]:
        if histories is None:
            histories = [None] * len(portfolios)
        if len(histories) != len(portfolios):
            raise ValueError("One history (or None) is required per portfolio")

        def run(item: tuple[Sequence[Holding], PortfolioHistory | None]) -> RiskMetrics:
            holdings, history = item
            return self.metrics_engine.comprehensive(holdings, history)

        return await self.pool.map(run, list(zip(portfolios, histories)))

    async def var_many(
        self,
        portfolios: Sequence[Sequence[Holding]],
        returns: Sequence[Sequence[float]] | None = None,
        seed: int | None = None,
    ) -> list[VaRResult]:
        """VaR per portfolio; portfolio ``i`` uses ``seed + i`` when seeded."""
        if returns is None:
            returns = [()] * len(portfolios)
        if len(returns) != len(portfolios):
            raise ValueError("One return series is required per portfolio")

        def run(i: int) -> VaRResult:
            return self.var_engine.calculate(
                portfolios[i],
                returns[i],
                seed=None if seed is None else seed + i,
            )

        logger.debug("Running VaR for %d portfolios", len(portfolios))
        return await self.pool.map(run, list(range(len(portfolios))))
