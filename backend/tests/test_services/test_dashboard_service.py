"""
Unit tests for DashboardService aggregates
"""
import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from apparel.services.dashboard_service import DashboardService, start_of_week

# A Wednesday
NOW = datetime(2025, 3, 12, 15, 45, tzinfo=timezone.utc)


@pytest.fixture
def orders():
    repository = MagicMock()
    repository.count_by_status.return_value = {"processing": 3, "delivered": 5, "canceled": 2}
    repository.revenue_summary.return_value = {"orders": 8, "revenue": Decimal("1000000")}
    repository.find_all.return_value = ([], 0)
    repository.top_products.return_value = [
        {"name": "Classic Tee", "product_id": "1", "sales": 12, "revenue": Decimal("1800000")},
    ]
    return repository


@pytest.fixture
def service(orders):
    products = MagicMock()
    products.get_stats.return_value = {"products": {"total": 4, "active": 3}, "variants": {"total": 40}}
    templates = MagicMock()
    templates.count.return_value = 6
    identity = MagicMock()
    identity.count_users = AsyncMock(return_value=120)
    identity.count_users_since = AsyncMock(return_value=7)
    return DashboardService(orders, products, templates, identity)


class TestPeriods:

    def test_week_starts_on_sunday(self):
        assert start_of_week(NOW) == datetime(2025, 3, 9, tzinfo=timezone.utc)

    def test_sunday_is_its_own_week_start(self):
        sunday = datetime(2025, 3, 9, 8, 0, tzinfo=timezone.utc)
        assert start_of_week(sunday) == datetime(2025, 3, 9, tzinfo=timezone.utc)


class TestStats:

    def test_order_counts_and_revenue(self, service):
        stats = asyncio.run(service.get_stats(now=NOW))

        assert stats["orders"]["total"] == 10
        assert stats["orders"]["pending"] == 0
        assert stats["revenue"] == {"total": 1000000.0, "average_order_value": 125000.0}
        assert stats["users"] == {"total": 120}
        assert stats["templates"] == {"total": 6}
        assert stats["today"]["new_users"] == 7
        assert stats["top_products"][0]["product_id"] == 1

    def test_periods_use_day_and_week_starts(self, service, orders):
        asyncio.run(service.get_stats(now=NOW))

        since_values = [call.kwargs.get("since") for call in orders.revenue_summary.call_args_list]
        assert datetime(2025, 3, 12, tzinfo=timezone.utc) in since_values
        assert datetime(2025, 3, 9, tzinfo=timezone.utc) in since_values


class TestRevenueAnalytics:

    def test_missing_days_are_zero_filled(self, service, orders):
        orders.daily_revenue.return_value = [
            {"day": date(2025, 3, 10), "orders": 2, "revenue": Decimal("300000")},
            {"day": date(2025, 3, 12), "orders": 1, "revenue": Decimal("150000")},
        ]

        result = service.revenue_analytics(days=7, now=NOW)

        assert len(result["series"]) == 7
        assert result["series"][0]["date"] == "2025-03-06"
        assert result["series"][-1] == {"date": "2025-03-12", "orders": 1, "revenue": 150000.0}
        assert result["series"][5] == {"date": "2025-03-11", "orders": 0, "revenue": 0.0}
        assert result["total_orders"] == 3
        assert result["total_revenue"] == 450000.0
