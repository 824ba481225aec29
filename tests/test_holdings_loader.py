from pathlib import Path

import pytest

from portfolio_risk.data.holdings_loader import (
    load_history,
    load_holdings,
    load_returns,
)


def write(tmp_path: Path, name: str, text: str) -> Path:
    p = tmp_path / name
    p.write_text(text)
    return p


class TestLoadHoldings:
    def test_basic(self, tmp_path: Path) -> None:
        p = write(
            tmp_path,
            "h.csv",
            "Name,Quantity,Purchase Price,Current Price\n"
            "AAPL,10,150,160\n"
            "GOOGL,5,2800,2900\n",
        )
        holdings = load_holdings(p)
        assert [h.name for h in holdings] == ["AAPL", "GOOGL"]
        assert holdings[0].initial_investment == 1500.0
        assert holdings[1].current_value == 14500.0

    def test_aliases_and_currency(self, tmp_path: Path) -> None:
        p = write(
            tmp_path,
            "h.csv",
            'Symbol,Shares,Avg Cost,Price,Cost Basis\n'
            'BTC,0.5,"$20,000","$30,000","$9,000"\n',
        )
        [h] = load_holdings(p)
        assert h.name == "BTC"
        assert h.quantity == 0.5
        assert h.purchase_price == 20_000.0
        assert h.current_price == 30_000.0
        assert h.initial_investment == 9_000.0

    def test_skips_messy_rows(self, tmp_path: Path) -> None:
        p = write(
            tmp_path,
            "h.csv",
            "name,qty,purchase_price,current_price\n"
            "AAPL,10,150,160\n"
            ",1,1,1\n"
            "BAD,abc,1,1\n"
            "NEG,-3,1,1\n"
            "MISSING,2,,5\n",
        )
        holdings = load_holdings(p)
        assert [h.name for h in holdings] == ["AAPL"]


class TestLoadReturns:
    def test_named_column(self, tmp_path: Path) -> None:
        p = write(tmp_path, "r.csv", "date,return\n2025-01-01,0.01\n2025-01-02,-0.02\n")
        assert load_returns(p) == pytest.approx([0.01, -0.02])

    def test_first_column_fallback(self, tmp_path: Path) -> None:
        p = write(tmp_path, "r.csv", "r\n0.01\nx\n0.03\n")
        assert load_returns(p) == pytest.approx([0.01, 0.03])

    def test_header_only(self, tmp_path: Path) -> None:
        p = write(tmp_path, "r.csv", "return\n")
        assert load_returns(p) == []


class TestLoadHistory:
    def test_values_compound_from_start(self, tmp_path: Path) -> None:
        p = write(tmp_path, "r.csv", "return\n0.10\n-0.50\n")
        hist = load_history(p, start_value=100.0)
        assert hist.returns == pytest.approx([0.10, -0.50])
        assert hist.values == pytest.approx([100.0, 110.0, 55.0])
        assert hist.market_returns == []
        assert not hist.is_complete

    def test_benchmark_column(self, tmp_path: Path) -> None:
        p = write(
            tmp_path,
            "r.csv",
            "date,return,benchmark\n"
            "2025-01-01,0.01,0.02\n"
            "2025-01-02,0.03,\n"
            "2025-01-03,-0.02,-0.01\n",
        )
        hist = load_history(p)
        assert hist.returns == pytest.approx([0.01, -0.02])
        assert hist.market_returns == pytest.approx([0.02, -0.01])
        assert hist.is_complete

    def test_benchmark_not_used_as_returns(self, tmp_path: Path) -> None:
        p = write(tmp_path, "r.csv", "market,r\n0.05,0.01\n")
        hist = load_history(p)
        assert hist.returns == pytest.approx([0.01])
        assert hist.market_returns == pytest.approx([0.05])

    def test_header_only(self, tmp_path: Path) -> None:
        p = write(tmp_path, "r.csv", "return,market\n")
        assert load_history(p).is_empty
