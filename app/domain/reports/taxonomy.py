"""Chart of accounts used by the financial statement report."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StatementTaxonomy:
    """Closed, ordered set of account names grouped by statement section.

    Order inside each group is the order lines are printed in.
    """

    revenues: tuple[str, ...]
    expenses: tuple[str, ...]
    assets: tuple[str, ...]
    liabilities: tuple[str, ...]
    equity: tuple[str, ...]

    def accounts(self) -> tuple[str, ...]:
        return (
            self.revenues
            + self.expenses
            + self.assets
            + self.liabilities
            + self.equity
        )


DEFAULT_TAXONOMY = StatementTaxonomy(
    revenues=("Sales Revenue",),
    expenses=(
        "Cost of Goods Sold",
        "Salaries Expense",
        "Rent Expense",
        "Utilities Expense",
        "Interest Expense",
        "Tax Expense",
    ),
    assets=(
        "Cash",
        "Accounts Receivable",
        "Inventory",
        "Fixed Assets",
        "Prepaid Expenses",
    ),
    liabilities=(
        "Accounts Payable",
        "Loan Payable",
        "Sales Tax Payable",
        "Accrued Liabilities",
        "Unearned Revenue",
        "Dividends Payable",
    ),
    equity=("Common Stock", "Retained Earnings"),
)
