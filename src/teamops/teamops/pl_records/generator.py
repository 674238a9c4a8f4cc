"""Builds P&L rows for a month from self-reports, member tools and invoice expenses.

Labour cost per report:
  hourly  -> reported hours x hourly rate
  monthly -> salary x (hours on this project / member's total reported hours)
Tool cost is the member's monthly tool total, prorated by the same hour share.
Revenue:
  boost_dispatch -> labour x markup + tools (markup defaults to break-even)
  otherwise      -> the project's monthly contract amount
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from ..common.rounding import round_half_up
from ..core.enums import ProjectType, SalaryType
from ..members.model import Member
from ..projects.model import Project
from ..self_reports.model import SelfReport
from .model import GeneratedPL, gross_profit_rate


@dataclass
class ProjectCost:
    labor: int = 0
    tools: int = 0


@dataclass(frozen=True)
class ExistingAdjustment:
    markup_rate: Optional[float]
    cost_other: int


def costs_by_project(
    reports: Sequence[SelfReport],
    members: Mapping[int, Member],
    tool_totals: Mapping[int, int],
) -> dict[int, ProjectCost]:
    member_hours: dict[int, float] = defaultdict(float)
    for r in reports:
        member_hours[r.member_id] += r.reported_hours

    costs: dict[int, ProjectCost] = defaultdict(ProjectCost)
    for r in reports:
        member = members.get(r.member_id)
        if member is None:
            continue
        total = member_hours[r.member_id] or 1
        share = r.reported_hours / total
        if member.salary_type is SalaryType.HOURLY:
            labor = round_half_up(r.reported_hours * member.salary_amount)
        else:
            labor = round_half_up(share * member.salary_amount)
        tools = round_half_up(tool_totals.get(r.member_id, 0) * share)

        cost = costs[r.project_id]
        cost.labor += labor
        cost.tools += tools
    return dict(costs)


def breakeven_markup(labor: int, cost_other: int) -> float:
    return (labor + cost_other) / labor if labor > 0 else 1.0


def build_record(
    project: Project,
    cost: ProjectCost,
    *,
    expense: int,
    existing: Optional[ExistingAdjustment],
) -> GeneratedPL:
    cost_other = expense + (existing.cost_other if existing else 0)
    markup = existing.markup_rate if existing and existing.markup_rate else breakeven_markup(cost.labor, cost_other)

    if project.project_type is ProjectType.BOOST_DISPATCH:
        revenue = round_half_up(cost.labor * markup + cost.tools)
    else:
        revenue = project.monthly_contract_amount

    gross_profit = revenue - cost.labor - cost.tools - cost_other
    return GeneratedPL(
        project_id=project.project_id,
        revenue_contract=revenue,
        cost_labor_hourly=cost.labor,
        cost_tools=cost.tools,
        cost_other=cost_other,
        gross_profit=gross_profit,
        gross_profit_rate=gross_profit_rate(gross_profit, revenue),
        markup_rate=markup if project.project_type is ProjectType.BOOST_DISPATCH else None,
    )
