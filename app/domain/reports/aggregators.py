"""Report aggregators — fold transaction rows into a rendered CSV document.

Each aggregator is single-use: create one per run, feed every row through
``handle`` and call ``render`` once the input is exhausted.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from app.domain.reports.taxonomy import DEFAULT_TAXONOMY, StatementTaxonomy
from app.domain.reports.transaction import TransactionRow, format_amount, parse_year
from app.domain.value_objects.enums import ReportName


class ReportAggregator(ABC):
    name: ReportName
    # Input files skipped so a previous output is never re-ingested.
    excluded_files: frozenset[str] = frozenset()
    # Rows with a non-numeric amount or (yearly) an unreadable date
    unparsed: int = 0

    def accepts_file(self, filename: str) -> bool:
        return filename not in self.excluded_files

    def _delta(self, row: TransactionRow) -> float:
        value = row.delta()
        if math.isnan(value):
            self.unparsed += 1
        return value

    @abstractmethod
    def handle(self, row: TransactionRow) -> bool:
        """Fold one row in. Returns True if the row contributed to a balance."""
        ...

    @abstractmethod
    def render(self) -> str:
        """Serialize the aggregate. Lines are joined with ``\\n``, no trailing newline."""
        ...


class AccountsAggregator(ReportAggregator):
    """Balance per account, in first-seen order."""

    name = ReportName.ACCOUNTS

    def __init__(self) -> None:
        self.balances: dict[str, float] = {}

    def handle(self, row: TransactionRow) -> bool:
        if not row.account.strip():
            return False
        self.balances[row.account] = self.balances.get(row.account, 0.0) + self._delta(row)
        return True

    def render(self) -> str:
        lines = ["Account,Balance"]
        lines.extend(
            f"{account},{format_amount(balance)}"
            for account, balance in self.balances.items()
        )
        return "\n".join(lines)


class YearlyCashAggregator(ReportAggregator):
    """Cash balance movement per calendar year."""

    name = ReportName.YEARLY
    excluded_files = frozenset({ReportName.YEARLY.output_file})

    CASH_ACCOUNT = "Cash"

    def __init__(self) -> None:
        self.cash_by_year: dict[str, float] = {}

    def handle(self, row: TransactionRow) -> bool:
        if row.account != self.CASH_ACCOUNT:
            return False
        year = parse_year(row.date)
        if year is None:
            self.unparsed += 1
            return False
        self.cash_by_year[year] = self.cash_by_year.get(year, 0.0) + self._delta(row)
        return True

    def render(self) -> str:
        lines = ["Financial Year,Cash Balance"]
        lines.extend(
            f"{year},{format_amount(self.cash_by_year[year])}"
            for year in sorted(self.cash_by_year)
        )
        return "\n".join(lines)


class FinancialStatementAggregator(ReportAggregator):
    """Income statement plus balance sheet over a closed chart of accounts."""

    name = ReportName.FINANCIAL_STATEMENT
    excluded_files = frozenset({ReportName.FINANCIAL_STATEMENT.output_file})

    def __init__(self, taxonomy: StatementTaxonomy = DEFAULT_TAXONOMY) -> None:
        self.taxonomy = taxonomy
        self.balances: dict[str, float] = dict.fromkeys(taxonomy.accounts(), 0.0)

    def handle(self, row: TransactionRow) -> bool:
        if row.account not in self.balances:
            return False
        self.balances[row.account] += self._delta(row)
        return True

    def _section(self, lines: list[str], accounts: tuple[str, ...]) -> float:
        total = 0.0
        for account in accounts:
            value = self.balances[account]
            lines.append(f"{account},{format_amount(value)}")
            total += value
        return total

    def render(self) -> str:
        t = self.taxonomy
        lines = ["Basic Financial Statement", "", "Income Statement"]
        total_revenue = self._section(lines, t.revenues)
        total_expenses = self._section(lines, t.expenses)
        net_income = total_revenue - total_expenses
        lines.append(f"Net Income,{format_amount(net_income)}")

        lines += ["", "Balance Sheet", "Assets"]
        total_assets = self._section(lines, t.assets)
        lines.append(f"Total Assets,{format_amount(total_assets)}")

        lines += ["", "Liabilities"]
        total_liabilities = self._section(lines, t.liabilities)
        lines.append(f"Total Liabilities,{format_amount(total_liabilities)}")

        lines += ["", "Equity"]
        total_equity = self._section(lines, t.equity)
        lines.append(f"Retained Earnings (Net Income),{format_amount(net_income)}")
        total_equity += net_income
        lines.append(f"Total Equity,{format_amount(total_equity)}")

        lines.append("")
        lines.append(
            "Assets = Liabilities + Equity, "
            f"{format_amount(total_assets)} = "
            f"{format_amount(total_liabilities + total_equity)}"
        )
        return "\n".join(lines)


_AGGREGATORS: dict[ReportName, type[ReportAggregator]] = {
    ReportName.ACCOUNTS: AccountsAggregator,
    ReportName.YEARLY: YearlyCashAggregator,
    ReportName.FINANCIAL_STATEMENT: FinancialStatementAggregator,
}


def build_aggregator(name: ReportName) -> ReportAggregator:
    """Fresh aggregator for one run of the named report."""
    return _AGGREGATORS[name]()
