"""
Dashboard Service

Aggregates for the admin dashboard. Order figures come from the database;
user figures come from the identity provider.

Revenue and order counts exclude canceled orders. Weeks start on Sunday.
"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import SU, relativedelta

from apparel.connectors.identity_connector import IdentityConnector
from apparel.domain.order import ORDER_STATUSES
from apparel.repositories.design_template_repository import DesignTemplateRepository
from apparel.repositories.order_repository import OrderRepository
from apparel.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 10
TOP_PRODUCTS_LIMIT = 5


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Most recent Sunday at midnight (today when today is Sunday)"""
    return start_of_day(now) + relativedelta(weekday=SU(-1))


def _period(summary: dict, new_users: int) -> dict:
    return {
        "orders": int(summary.get("orders") or 0),
        "revenue": float(summary.get("revenue") or 0),
        "new_users": new_users,
    }


class DashboardService:

    def __init__(
        self,
        order_repository: OrderRepository = None,
        product_repository: ProductRepository = None,
        template_repository: DesignTemplateRepository = None,
        identity_connector: IdentityConnector = None
    ):
        self.orders = order_repository or OrderRepository()
        self.products = product_repository or ProductRepository()
        self.templates = template_repository or DesignTemplateRepository()
        self.identity = identity_connector or IdentityConnector()

    async def get_stats(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        today = start_of_day(now)
        week = start_of_week(now)

        by_status = self.orders.count_by_status()
        order_counts = {status: by_status.get(status, 0) for status in ORDER_STATUSES}
        order_counts["total"] = sum(by_status.values())

        revenue = self.orders.revenue_summary()
        total_revenue = Decimal(revenue.get("revenue") or 0)
        paid_orders = int(revenue.get("orders") or 0)
        average = total_revenue / paid_orders if paid_orders else Decimal("0")

        catalog = self.products.get_stats()
        recent, _ = self.orders.find_all(limit=RECENT_ORDERS_LIMIT)

        total_users = await self.identity.count_users()
        users_today = await self.identity.count_users_since(today)
        users_this_week = await self.identity.count_users_since(week)

        return {
            "orders": order_counts,
            "revenue": {
                "total": float(total_revenue),
                "average_order_value": float(round(average, 2)),
            },
            "products": catalog["products"],
            "variants": catalog["variants"],
            "users": {"total": total_users},
            "templates": {"total": self.templates.count()},
            "recent_orders": [order.to_dict() for order in recent],
            "today": _period(self.orders.revenue_summary(since=today), users_today),
            "this_week": _period(self.orders.revenue_summary(since=week), users_this_week),
            "top_products": [
                {
                    "name": row["name"],
                    "product_id": int(row["product_id"]) if row.get("product_id") else None,
                    "sales": int(row["sales"] or 0),
                    "revenue": float(row["revenue"] or 0),
                }
                for row in self.orders.top_products(TOP_PRODUCTS_LIMIT)
            ],
        }

    def revenue_analytics(self, days: int = 30, now: Optional[datetime] = None) -> dict:
        """
        Daily revenue and order counts over the last `days` days

        Days without orders are filled with zeros so charts get a continuous series.
        """
        now = now or datetime.now(timezone.utc)
        since = start_of_day(now) - relativedelta(days=days - 1)
        rows = {row["day"]: row for row in self.orders.daily_revenue(since)}

        series = []
        for offset in range(days):
            day = (since + timedelta(days=offset)).date()
            row = rows.get(day, {})
            series.append({
                "date": day.isoformat(),
                "orders": int(row.get("orders") or 0),
                "revenue": float(row.get("revenue") or 0),
            })

        return {
            "days": days,
            "series": series,
            "total_revenue": sum(point["revenue"] for point in series),
            "total_orders": sum(point["orders"] for point in series),
        }
