# dashboards/services.py
from __future__ import annotations

from django.db.models import Q

from complaints.models import Complaint
from orders.models import Order
from orders.serializers import order_queryset
from orders.services import status_counts
from payments.models import AdminBankAccount
from payments.services import get_revenue_cents
from payments.utils import cents_to_float

RECENT_ACTIVITY_LIMIT = 10


def admin_orders(*, status: str = "all", search: str = ""):
    qs = order_queryset()
    if status and status != "all":
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(
            Q(order_number__icontains=search)
            | Q(buyer__profile__full_name__icontains=search)
            | Q(buyer__email__icontains=search)
            | Q(seller__profile__business_name__icontains=search)
        )
    return qs


def admin_order_stats() -> dict:
    counts = status_counts(Order.objects.all())
    return {
        "totalOrders": sum(counts.values()),
        "pendingOrders": counts[Order.Status.PENDING],
        "confirmedOrders": counts[Order.Status.CONFIRMED],
        "shippedOrders": counts[Order.Status.SHIPPED],
        "deliveredOrders": counts[Order.Status.DELIVERED],
        "cancelledOrders": counts[Order.Status.CANCELLED],
        "statusCounts": counts,
        # Ledger sum, not a stored counter.
        "totalRevenue": cents_to_float(get_revenue_cents()),
    }


def _display_name(user) -> str:
    profile = getattr(user, "profile", None)
    if profile is not None:
        return profile.display_name
    return user.get_username() if user else "Unknown"


def recent_activities(limit: int = RECENT_ACTIVITY_LIMIT) -> list[dict]:
    """Latest orders and complaints merged newest first."""
    orders = Order.objects.select_related("buyer", "buyer__profile").order_by("-created_at")[:limit]
    complaints = Complaint.objects.select_related("user", "user__profile").order_by("-created_at")[:limit]

    activities = [
        {
            "type": "order",
            "message": f"New order #{o.order_number} by {_display_name(o.buyer)}",
            "time": o.created_at,
        }
        for o in orders
    ] + [
        {
            "type": "complaint",
            "message": f"New complaint by {_display_name(c.user)}: {c.subject}",
            "time": c.created_at,
        }
        for c in complaints
    ]
    activities.sort(key=lambda a: a["time"], reverse=True)
    return activities[:limit]


def bank_info() -> dict:
    accounts = AdminBankAccount.objects.filter(is_active=True)

    def _row(a: AdminBankAccount) -> dict:
        return {
            "id": a.pk,
            "provider": a.provider,
            "accountTitle": a.account_title,
            "accountNumber": a.account_number,
            "iban": a.iban,
            "branchCode": a.branch_code,
        }

    return {
        "bankAccounts": [_row(a) for a in accounts if a.kind == AdminBankAccount.Kind.BANK],
        "wallets": [_row(a) for a in accounts if a.kind == AdminBankAccount.Kind.WALLET],
    }
