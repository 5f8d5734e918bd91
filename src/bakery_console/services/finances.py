"""Financial reporting service."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from bakery_console.domain.models import (
    TRANSACTION_CATEGORIES,
    FinancialSummary,
    FinancialTransaction,
    Pagination,
    TransactionType,
)
from bakery_console.domain.parsing import parse_transaction
from bakery_console.domain.pricing import margin_percent
from bakery_console.domain.records import normalize_records
from bakery_console.services.resources import DEFAULT_PAGE_SIZE, ResourceService

TRANSACTIONS = "financial-transactions"
FINANCIAL_STATS = "financial-stats"
FINANCIAL_CHART = "financial-chart"


class StatsPeriod(Enum):
    """Reporting period for backend statistics."""

    MONTH = "month"
    YEAR = "year"


@dataclass
class FinanceService:
    """Service for transactions and aggregate statistics."""

    resources: ResourceService

    async def list_transactions(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, object] | None = None,
    ) -> tuple[list[FinancialTransaction], Pagination]:
        """Return a page of transactions, newest first."""
        params = {**(filters or {}), "populate": ["order"], "sort": ["date:desc"]}
        result = await self.resources.list_page(TRANSACTIONS, page, page_size, params)
        records = normalize_records(result.data)
        return [parse_transaction(record) for record in records], result.pagination

    async def list_by_type(
        self,
        transaction_type: TransactionType,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[FinancialTransaction], Pagination]:
        """Return only income or only expense transactions."""
        return await self.list_transactions(
            page,
            page_size,
            {"filters": {"type": {"$eq": transaction_type.value}}},
        )

    async def get_stats(
        self, period: StatsPeriod = StatsPeriod.MONTH
    ) -> dict[str, object] | None:
        """Return backend statistics for a period, or None when unavailable."""
        return await self.resources.fetch_json(
            FINANCIAL_STATS, {"period": period.value}
        )

    async def get_chart_data(self, months: int = 6) -> dict[str, object] | None:
        """Return monthly income/expense series, or None when unavailable."""
        if months < 1:
            raise ValueError("months must be >= 1")
        return await self.resources.fetch_json(FINANCIAL_CHART, {"months": months})

    def categories(self) -> list[str]:
        """Return the known transaction category labels."""
        return list(TRANSACTION_CATEGORIES)

    async def summarize_page(
        self, page: int = 1, page_size: int = 100
    ) -> FinancialSummary:
        """Summarize one page of transactions."""
        transactions, _ = await self.list_transactions(page, page_size)
        return summarize_transactions(transactions)


def summarize_transactions(
    transactions: Iterable[FinancialTransaction],
) -> FinancialSummary:
    """Total income and expenses and derive profit and margin."""
    income = 0.0
    expenses = 0.0
    for transaction in transactions:
        if transaction.transaction_type is TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.amount
    return FinancialSummary(
        income=income,
        expenses=expenses,
        profit=income - expenses,
        margin_percent=margin_percent(income, expenses),
    )
