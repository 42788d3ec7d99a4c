from dataclasses import dataclass
from datetime import datetime
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

WEEK = "week"
MONTH = "month"
YEAR = "year"
PERIODS = (WEEK, MONTH, YEAR)

DAY = "day"
GRANULARITIES = (DAY, WEEK)


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str                          # "income" | "expense"
    amount: float                      # never negative, sign comes from type
    owner_id: str
    date: datetime                     # business-effective date
    description: Optional[str] = None
    category_id: Optional[str] = None  # weak reference, may dangle
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    owner_id: str
    created_at: datetime
    icon: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class User:
    id: str
    email: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class AuthState:
    user: Optional[User] = None
    is_loading: bool = False


@dataclass(frozen=True)
class DashboardStats:
    total_balance: float = 0.0
    total_income: float = 0.0
    total_expenses: float = 0.0
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    weekly_income: float = 0.0
    weekly_expenses: float = 0.0


@dataclass(frozen=True)
class ChartPoint:
    label: str
    income: float
    expense: float
    date: str  # "YYYY-MM-DD" of the bucket's first day


@dataclass(frozen=True)
class CategoryBreakdown:
    id: str
    name: str
    owner_id: str
    created_at: datetime
    icon: Optional[str]
    color: Optional[str]
    total_amount: float
    transaction_count: int
    percentage_of_expenses: float

    @classmethod
    def from_category(
        cls, category: Category, total_amount: float, transaction_count: int, percentage: float
    ) -> "CategoryBreakdown":
        return cls(
            id=category.id,
            name=category.name,
            owner_id=category.owner_id,
            created_at=category.created_at,
            icon=category.icon,
            color=category.color,
            total_amount=total_amount,
            transaction_count=transaction_count,
            percentage_of_expenses=percentage,
        )


@dataclass(frozen=True)
class PeriodComparison:
    current: tuple[Transaction, ...]
    previous: tuple[Transaction, ...]
    percent_change: float
    current_expenses: float = 0.0
    previous_expenses: float = 0.0


@dataclass(frozen=True)
class PeriodSummary:
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_income: float = 0.0
    income_count: int = 0
    expense_count: int = 0

    @property
    def transaction_count(self) -> int:
        return self.income_count + self.expense_count


@dataclass(frozen=True)
class Insight:
    kind: str
    message: str
