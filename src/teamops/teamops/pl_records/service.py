from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.rounding import round_half_up
from ..common.validators import MONTH_RE
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import authorizer
from ..invoices.repository import InvoiceRepository
from ..members.repository import MemberRepository
from ..members.tool_repository import ToolRepository
from ..projects.repository import ProjectRepository
from ..self_reports.repository import SelfReportRepository
from ..users.model import SessionUser
from .generator import ProjectCost, build_record, costs_by_project
from .model import PLValues, gross_profit_rate
from .repository import PLRecordRepository
from .schemas import PLAdjust, PLUpsert

logger = logging.getLogger(__name__)


class PLService:
    """Project profit and loss: manual entry, markup adjustment and generation from actuals."""

    def __init__(
        self,
        records: PLRecordRepository,
        reports: SelfReportRepository,
        members: MemberRepository,
        tools: ToolRepository,
        projects: ProjectRepository,
        invoices: InvoiceRepository,
    ):
        self._records = records
        self._reports = reports
        self._members = members
        self._tools = tools
        self._projects = projects
        self._invoices = invoices

    def list(
        self,
        actor: SessionUser,
        *,
        month: Optional[str] = None,
        months: Optional[Sequence[str]] = None,
        project_id: Optional[int] = None,
    ) -> list[dict]:
        candidates = months if months else ([month] if month else [])
        targets = [m for m in candidates if MONTH_RE.match(m)]
        if not targets:
            raise ValidationError("month または months は必須です")
        return [r.to_dict() for r in self._records.list_records(targets, project_id=project_id)]

    def upsert(self, actor: SessionUser, payload: PLUpsert) -> dict:
        authorizer.require(actor, "pl", "write")
        if not self._projects.get_project(payload.projectId):
            raise NotFoundError("プロジェクトが見つかりません")

        values = PLValues(
            revenue_contract=payload.revenueContract,
            revenue_extra=payload.revenueExtra,
            cost_labor_monthly=payload.costLaborMonthly,
            cost_labor_hourly=payload.costLaborHourly,
            cost_outsourcing=payload.costOutsourcing,
            cost_tools=payload.costTools,
            cost_other=payload.costOther,
        )
        record_id = self._records.upsert(
            payload.projectId,
            payload.targetMonth,
            values,
            markup_rate=payload.markupRate,
            memo=payload.memo,
            actor_id=actor.id,
        )
        return {
            "id": record_id,
            "grossProfit": values.gross_profit,
            "grossProfitRate": gross_profit_rate(values.gross_profit, values.revenue),
        }

    def adjust(self, actor: SessionUser, payload: PLAdjust) -> dict:
        """Recompute contract revenue from a new markup and/or replace the extra revenue."""
        authorizer.require(actor, "pl", "write")
        current = self._records.get(payload.id)
        if not current:
            raise NotFoundError("PLレコードが見つかりません")

        v = current.values
        if payload.markupRate is not None:
            revenue_contract = round_half_up(v.labor_cost * payload.markupRate + v.cost_tools)
        else:
            revenue_contract = v.revenue_contract
        revenue_extra = payload.revenueExtra if payload.revenueExtra is not None else v.revenue_extra

        revenue = revenue_contract + revenue_extra
        gp = revenue - v.labor_cost - v.cost_tools - v.cost_other
        self._records.update_adjustment(
            payload.id,
            revenue_contract=revenue_contract,
            revenue_extra=revenue_extra,
            markup_rate=payload.markupRate,
            gross_profit=gp,
            gross_profit_rate=gross_profit_rate(gp, revenue),
        )
        return {
            "id": payload.id,
            "markupRate": payload.markupRate if payload.markupRate is not None else current.markup_rate,
            "revenueExtra": revenue_extra,
            "revenue": revenue,
            "grossProfit": gp,
        }

    def generate(self, actor: SessionUser, month: str) -> dict:
        authorizer.require(actor, "pl", "generate")
        reports = self._reports.list_for_month(month)
        if not reports:
            return {"message": "自己申告データがありません", "generated": 0}

        member_ids = sorted({r.member_id for r in reports})
        members = {m.member_id: m for m in self._members.list_not_deleted() if m.member_id in member_ids}
        costs = costs_by_project(reports, members, self._tools.monthly_totals(member_ids))

        project_ids = sorted({r.project_id for r in reports})
        projects = self._projects.get_projects(project_ids)
        existing = self._records.adjustments(month, project_ids)
        expenses = self._invoices.expense_totals_by_project(month, project_ids)

        rows = [
            build_record(
                p,
                costs.get(p.project_id, ProjectCost()),
                expense=expenses.get(p.project_id, 0),
                existing=existing.get(p.project_id),
            )
            for p in projects
        ]
        generated = self._records.save_generated(month, rows, actor_id=actor.id)
        logger.info("generated %d P&L records for %s", generated, month)
        return {
            "message": f"{generated} 件の PL レコードを生成しました",
            "generated": generated,
            "targetMonth": month,
        }
