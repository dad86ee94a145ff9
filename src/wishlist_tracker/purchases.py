"""Purchase history analytics."""

from datetime import datetime

from .models import (
    MissedOpportunities,
    PurchaseComparison,
    PurchaseRecord,
    PurchaseStatistics,
)


def missed_opportunities(purchases: list[PurchaseRecord]) -> MissedOpportunities:
    """Savings lost by buying above the lowest price ever observed."""
    missed = [p for p in purchases if p.could_have_saved_more]
    if not missed:
        return MissedOpportunities()

    total = sum(p.missed_savings for p in missed)
    biggest = max(missed, key=lambda p: p.missed_savings)
    return MissedOpportunities(
        total_missed_savings=round(total, 2),
        items_with_missed_savings=len(missed),
        average_missed_savings=round(total / len(missed), 2),
        biggest_miss=biggest,
        biggest_miss_amount=round(biggest.missed_savings, 2),
    )


def compare_purchases(purchases: list[PurchaseRecord]) -> PurchaseComparison:
    if not purchases:
        return PurchaseComparison()

    total_savings = sum(p.total_savings for p in purchases)
    return PurchaseComparison(
        total_purchases=len(purchases),
        total_spent=round(sum(p.purchase_price for p in purchases), 2),
        total_original_value=round(sum(p.original_price for p in purchases), 2),
        total_savings=round(total_savings, 2),
        total_missed_savings=round(sum(p.missed_savings for p in purchases), 2),
        average_savings_per_purchase=round(total_savings / len(purchases), 2),
        best_purchase=max(purchases, key=lambda p: p.total_savings),
        worst_purchase=max(purchases, key=lambda p: p.missed_savings),
    )


def purchase_statistics(
    purchases: list[PurchaseRecord], now: datetime | None = None
) -> PurchaseStatistics:
    """Totals overall and for the current calendar month."""
    now = now or datetime.now()
    this_month = [
        p
        for p in purchases
        if p.purchase_date.year == now.year and p.purchase_date.month == now.month
    ]
    return PurchaseStatistics(
        total_purchases=len(purchases),
        this_month_purchases=len(this_month),
        total_spent=round(sum(p.purchase_price for p in purchases), 2),
        this_month_spent=round(sum(p.purchase_price for p in this_month), 2),
        total_savings=round(sum(p.total_savings for p in purchases), 2),
        this_month_savings=round(sum(p.total_savings for p in this_month), 2),
    )
