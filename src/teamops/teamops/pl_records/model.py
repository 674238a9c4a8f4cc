from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.rounding import round_half_up

RECORD_TYPE_PL = "pl"


def gross_profit_rate(gross_profit: int, revenue: int) -> float:
    """Percentage of revenue, two decimals; 0 when there is no revenue."""
    if revenue <= 0:
        return 0.0
    return round_half_up(gross_profit / revenue * 100, 2)


@dataclass(frozen=True)
class PLValues:
    revenue_contract: int = 0
    revenue_extra: int = 0
    cost_labor_monthly: int = 0
    cost_labor_hourly: int = 0
    cost_outsourcing: int = 0
    cost_tools: int = 0
    cost_other: int = 0

    @property
    def revenue(self) -> int:
        return self.revenue_contract + self.revenue_extra

    @property
    def labor_cost(self) -> int:
        return self.cost_labor_monthly + self.cost_labor_hourly + self.cost_outsourcing

    @property
    def total_cost(self) -> int:
        return self.labor_cost + self.cost_tools + self.cost_other

    @property
    def gross_profit(self) -> int:
        return self.revenue - self.total_cost


@dataclass(frozen=True)
class PLRecord:
    record_id: int
    project_id: int
    target_month: str
    values: PLValues
    gross_profit: int
    gross_profit_rate: float
    markup_rate: Optional[float] = None
    memo: Optional[str] = None
    project_name: Optional[str] = None
    project_type: Optional[str] = None
    company: Optional[str] = None
    project_status: Optional[str] = None
    client_name: Optional[str] = None

    def to_dict(self) -> dict:
        v = self.values
        return {
            "id": self.record_id,
            "projectId": self.project_id,
            "projectName": self.project_name or "—",
            "projectType": self.project_type or "salt2_own",
            "company": self.company or "salt2",
            "projectStatus": self.project_status or "active",
            "clientName": self.client_name,
            "targetMonth": self.target_month,
            "revenue": v.revenue,
            "revenueContract": v.revenue_contract,
            "revenueExtra": v.revenue_extra,
            "laborCost": v.labor_cost,
            "costLaborMonthly": v.cost_labor_monthly,
            "costLaborHourly": v.cost_labor_hourly,
            "costOutsourcing": v.cost_outsourcing,
            "toolCost": v.cost_tools,
            "otherCost": v.cost_other,
            "grossProfit": self.gross_profit,
            "grossMargin": self.gross_profit_rate,
            "markupRate": self.markup_rate,
        }


@dataclass(frozen=True)
class GeneratedPL:
    """Computed row for one project; cost_other and markup_rate only apply on first insert."""

    project_id: int
    revenue_contract: int
    cost_labor_hourly: int
    cost_tools: int
    cost_other: int
    gross_profit: int
    gross_profit_rate: float
    markup_rate: Optional[float]
