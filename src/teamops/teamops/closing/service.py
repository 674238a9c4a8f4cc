from __future__ import annotations

import io
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Mapping, Optional

import pandas as pd

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_jp_month, month_bounds
from ..common.rounding import round_half_up
from ..core.enums import NotificationChannel, SalaryType
from ..core.exceptions import NotFoundError
from ..core.policy import authorizer
from ..invoices.repository import InvoiceRepository
from ..members.repository import MemberRepository
from ..notifications.service import NotificationService
from ..schedules.repository import ScheduleRepository
from ..users.model import SessionUser
from .estimators.base import AmountEstimator
from .estimators.hourly_estimator import HourlyAmountEstimator
from .estimators.monthly_estimator import MonthlyAmountEstimator
from .model import CONTRACT_LABELS, ClosingRow, confirm_status_of, invoice_status_of

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_SHEET = "月次締め"


@dataclass(frozen=True)
class ClosingExport:
    filename: str
    content: bytes
    mimetype: str = XLSX_MIMETYPE


class ClosingService:
    """Monthly closing: per-member hours, missing days, confirmation and invoice state."""

    def __init__(
        self,
        members: MemberRepository,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        invoices: InvoiceRepository,
        notifications: NotificationService,
        *,
        estimators: Optional[Mapping[SalaryType, AmountEstimator]] = None,
    ):
        self._members = members
        self._attendance = attendance
        self._schedules = schedules
        self._invoices = invoices
        self._notifications = notifications
        self._estimators = estimators or {
            SalaryType.HOURLY: HourlyAmountEstimator(),
            SalaryType.MONTHLY: MonthlyAmountEstimator(),
        }

    def summary(self, actor: SessionUser, month: str) -> list[dict]:
        return [row.to_dict() for row in self._rows(actor, month)]

    def _rows(self, actor: SessionUser, month: str) -> list[ClosingRow]:
        if authorizer.allows(actor, "closing", "read_all"):
            members = list(self._members.list_not_deleted())
        else:
            me = self._members.get_member(actor.member_id)
            members = [me] if me else []
        if not members:
            return []

        start, end = month_bounds(month)
        member_ids = [m.member_id for m in members]

        attendance_by_member = defaultdict(list)
        for rec in self._attendance.list_in_range(member_ids=member_ids, start=start, end=end):
            attendance_by_member[rec.member_id].append(rec)

        scheduled_by_member = defaultdict(set)
        for s in self._schedules.list_in_range(member_ids=member_ids, start=start, end=end):
            if not s.is_off:
                scheduled_by_member[s.member_id].add(s.work_date)

        invoices = {inv.member_id: inv for inv in self._invoices.list_for_month(month)}

        rows = []
        for m in members:
            records = attendance_by_member[m.member_id]
            clocked = [r for r in records if r.clock_in is not None]
            clocked_dates = {r.work_date for r in clocked}
            total_minutes = sum(r.work_minutes or 0 for r in records)
            total_hours = round_half_up(total_minutes / 60, 1)

            inv = invoices.get(m.member_id)
            if inv:
                estimated = inv.amount_excl_tax
            else:
                estimated = self._estimators[m.salary_type].estimate(m, total_hours)

            rows.append(
                ClosingRow(
                    member_id=m.member_id,
                    member_name=m.name,
                    salary_type=m.salary_type,
                    salary_amount=m.salary_amount,
                    work_days=len(clocked),
                    total_hours=total_hours,
                    missing_days=len(scheduled_by_member[m.member_id] - clocked_dates),
                    estimated_amount=estimated,
                    confirm_status=confirm_status_of(records),
                    invoice_status=invoice_status_of(inv.status if inv else None),
                    invoice_id=inv.invoice_id if inv else None,
                    invoice_number=inv.invoice_number if inv else None,
                )
            )
        return rows

    def notify(self, actor: SessionUser, member_id: int, month: str) -> dict:
        authorizer.require(actor, "closing", "notify")
        member = self._members.get_member(member_id)
        if not member:
            raise NotFoundError("メンバーが見つかりません")

        start, end = month_bounds(month)
        updated = self._attendance.mark_notified(member_id, start=start, end=end)
        self._notifications.slack(
            NotificationChannel.ATTENDANCE,
            f"[勤怠確認] {member.name} さん、{format_jp_month(month)}分の勤怠内容を確認してください",
        )
        logger.info("closing notice for member %s %s (%d rows)", member_id, month, updated)
        return {"ok": True}

    def export(self, actor: SessionUser, month: str) -> ClosingExport:
        authorizer.require(actor, "closing", "export")
        data = [
            {
                "メンバー": r.member_name,
                "契約形態": CONTRACT_LABELS[r.salary_type],
                "稼働日数": r.work_days,
                "合計時間": r.total_hours,
                "未打刻日数": r.missing_days,
                "見込金額": r.estimated_amount,
                "勤怠確認": r.confirm_status.value,
                "請求書": r.invoice_status.value,
                "請求書番号": r.invoice_number or "",
            }
            for r in self._rows(actor, month)
        ]
        df = pd.DataFrame(data, columns=["メンバー", "契約形態", "稼働日数", "合計時間", "未打刻日数",
                                         "見込金額", "勤怠確認", "請求書", "請求書番号"])

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=EXPORT_SHEET)
        return ClosingExport(filename=f"closing-{month}.xlsx", content=output.getvalue())
