"""Rule-based spending hints shown under the analytics cards."""
from typing import Sequence

from inout.domain import CategoryBreakdown, Insight, PeriodComparison, PeriodSummary
from inout.formatting import format_percent

EXPENSE_INCREASE = "expense_increase"
EXPENSE_DECREASE = "expense_decrease"
CATEGORY_CONCENTRATION = "category_concentration"
NEGATIVE_CASH_FLOW = "negative_cash_flow"
FEW_TRANSACTIONS = "few_transactions"

CHANGE_THRESHOLD = 10.0
CONCENTRATION_THRESHOLD = 40.0
MIN_TRANSACTIONS = 5


def build_insights(
    period: str,
    summary: PeriodSummary,
    comparison: PeriodComparison,
    breakdown: Sequence[CategoryBreakdown],
) -> tuple[Insight, ...]:
    count = summary.transaction_count
    if count == 0:
        return ()

    insights = []
    change = comparison.percent_change
    if change > CHANGE_THRESHOLD:
        insights.append(Insight(
            EXPENSE_INCREASE,
            f"Your expenses increased by {format_percent(change)} compared to the previous {period}. "
            "Consider reviewing your spending in the top categories.",
        ))
    if change < -CHANGE_THRESHOLD:
        insights.append(Insight(
            EXPENSE_DECREASE,
            f"Great job! Your expenses decreased by {format_percent(abs(change))} "
            f"compared to the previous {period}.",
        ))

    if breakdown and breakdown[0].percentage_of_expenses > CONCENTRATION_THRESHOLD:
        top = breakdown[0]
        insights.append(Insight(
            CATEGORY_CONCENTRATION,
            f"{top.name} accounts for {format_percent(top.percentage_of_expenses)} of your expenses. "
            "Consider setting a budget limit for this category.",
        ))

    if summary.net_income < 0:
        insights.append(Insight(
            NEGATIVE_CASH_FLOW,
            f"Your expenses exceed your income this {period}. "
            "Consider reducing spending or increasing income sources.",
        ))

    if count < MIN_TRANSACTIONS:
        insights.append(Insight(
            FEW_TRANSACTIONS,
            f"You have only {count} transactions this {period}. "
            "Make sure to log all your expenses for better insights.",
        ))

    return tuple(insights)
