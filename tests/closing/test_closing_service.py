from __future__ import annotations

import io
from datetime import date, datetime, timedelta

import pytest
from openpyxl import load_workbook

from src.teamops.teamops.attendance.model import AttendanceRecord
from src.teamops.teamops.closing.service import ClosingService
from src.teamops.teamops.core.enums import (
    Company,
    ConfirmStatus,
    InvoiceStatus,
    MemberStatus,
    NotificationChannel,
    SalaryType,
)
from src.teamops.teamops.core.exceptions import AuthorizationError, NotFoundError
from src.teamops.teamops.invoices.model import Invoice
from src.teamops.teamops.members.model import Member
from src.teamops.teamops.schedules.model import WorkSchedule

MONTH = "2026-04"


def _member(member_id, name, salary_type, amount):
    return Member(
        member_id=member_id,
        name=name,
        status=MemberStatus.EMPLOYEE,
        company=Company.BOOST,
        salary_type=salary_type,
        salary_amount=amount,
        joined_at=date(2025, 4, 1),
    )


class InMemoryMembers:
    def __init__(self, members):
        self._members = {m.member_id: m for m in members}

    def list_not_deleted(self):
        return list(self._members.values())

    def get_member(self, member_id):
        return self._members.get(member_id)


class InMemoryAttendance:
    def __init__(self, rows):
        self.rows = rows
        self.notified = []

    def list_in_range(self, *, member_ids, start, end):
        return [r for r in self.rows if r.member_id in member_ids and start <= r.work_date <= end]

    def mark_notified(self, member_id, *, start, end):
        self.notified.append((member_id, start, end))
        return sum(1 for r in self.rows if r.member_id == member_id)


class InMemorySchedules:
    def __init__(self, rows):
        self.rows = rows

    def list_in_range(self, *, member_ids, start, end):
        return [s for s in self.rows if s.member_id in member_ids and start <= s.work_date <= end]


class InMemoryInvoices:
    def __init__(self, invoices=()):
        self.invoices = list(invoices)

    def list_for_month(self, target_month):
        return [i for i in self.invoices if i.target_month == target_month]


def _worked_days(member_id, days, *, confirm=ConfirmStatus.UNCONFIRMED):
    rows = []
    for n, d in enumerate(days, start=1):
        clock_in = datetime(d.year, d.month, d.day, 9, 0)
        rows.append(
            AttendanceRecord(
                attendance_id=member_id * 100 + n,
                member_id=member_id,
                work_date=d,
                clock_in=clock_in,
                clock_out=clock_in + timedelta(hours=9),
                break_minutes=60,
                work_minutes=480,
                confirm_status=confirm,
            )
        )
    return rows


def _scheduled(member_id, days):
    return [WorkSchedule(schedule_id=member_id * 100 + n, member_id=member_id, work_date=d) for n, d in enumerate(days)]


APRIL = [date(2026, 4, 1) + timedelta(days=i) for i in range(20)]


def _service(members, attendance, schedules, invoices, notifications):
    return ClosingService(
        InMemoryMembers(members),
        InMemoryAttendance(attendance),
        InMemorySchedules(schedules),
        InMemoryInvoices(invoices),
        notifications,
    )


def test_invoice_amount_overrides_estimate_and_missing_days_counted(admin, notifications):
    yamada = _member(3, "山田", SalaryType.MONTHLY, 250000)
    invoice = Invoice(
        invoice_id=9,
        invoice_number="INV-202604-0001",
        member_id=3,
        target_month=MONTH,
        work_hours_total=144,
        unit_price=0,
        amount_excl_tax=300000,
        amount_incl_tax=330000,
        expense_amount=0,
        status=InvoiceStatus.SENT,
        issued_at=date(2026, 4, 30),
    )
    svc = _service([yamada], _worked_days(3, APRIL[:18]), _scheduled(3, APRIL), [invoice], notifications)

    [row] = svc.summary(admin, MONTH)

    assert row["workDays"] == 18
    assert row["missingDays"] == 2
    assert row["totalHours"] == 144.0
    assert row["estimatedAmount"] == 300000
    assert row["invoiceStatus"] == "sent"
    assert row["invoiceNumber"] == "INV-202604-0001"
    assert row["contractType"] == "月給制"
    assert row["hourlyRate"] is None


def test_hourly_member_without_invoice_is_estimated_from_hours(admin, notifications):
    sato = _member(4, "佐藤", SalaryType.HOURLY, 3000)
    svc = _service([sato], _worked_days(4, APRIL), _scheduled(4, APRIL), [], notifications)

    [row] = svc.summary(admin, MONTH)

    assert row["totalHours"] == 160.0
    assert row["estimatedAmount"] == 480000
    assert row["invoiceStatus"] == "none"
    assert row["hourlyRate"] == 3000


def test_day_off_schedules_are_not_missing_days(admin, notifications):
    sato = _member(4, "佐藤", SalaryType.MONTHLY, 200000)
    schedules = _scheduled(4, APRIL[:2]) + [WorkSchedule(schedule_id=999, member_id=4, work_date=APRIL[2], is_off=True)]
    svc = _service([sato], _worked_days(4, APRIL[:2]), schedules, [], notifications)

    [row] = svc.summary(admin, MONTH)

    assert row["missingDays"] == 0


def test_all_rows_confirmed_reports_confirmed(admin, notifications):
    sato = _member(4, "佐藤", SalaryType.MONTHLY, 200000)
    rows = _worked_days(4, APRIL[:3], confirm=ConfirmStatus.APPROVED)
    svc = _service([sato], rows, [], [], notifications)

    [row] = svc.summary(admin, MONTH)

    assert row["confirmStatus"] == "confirmed"


def test_member_sees_only_own_row(member, notifications):
    me = _member(member.member_id, "山田", SalaryType.MONTHLY, 200000)
    other = _member(8, "他人", SalaryType.MONTHLY, 200000)
    svc = _service([me, other], [], [], [], notifications)

    rows = svc.summary(member, MONTH)

    assert [r["memberId"] for r in rows] == [member.member_id]


def test_notify_marks_rows_and_posts_to_attendance_channel(manager, notifications):
    sato = _member(4, "佐藤", SalaryType.MONTHLY, 200000)
    attendance = InMemoryAttendance(_worked_days(4, APRIL[:2]))
    svc = ClosingService(
        InMemoryMembers([sato]), attendance, InMemorySchedules([]), InMemoryInvoices(), notifications
    )

    assert svc.notify(manager, 4, MONTH) == {"ok": True}
    assert attendance.notified == [(4, date(2026, 4, 1), date(2026, 4, 30))]
    channel, text = notifications.slack_messages[0]
    assert channel is NotificationChannel.ATTENDANCE
    assert text == "[勤怠確認] 佐藤 さん、2026年04月分の勤怠内容を確認してください"


def test_notify_requires_staff_and_existing_member(member, manager, notifications):
    svc = _service([], [], [], [], notifications)
    with pytest.raises(AuthorizationError):
        svc.notify(member, 4, MONTH)
    with pytest.raises(NotFoundError):
        svc.notify(manager, 4, MONTH)


def test_export_writes_closing_sheet(admin, notifications):
    sato = _member(4, "佐藤", SalaryType.HOURLY, 3000)
    svc = _service([sato], _worked_days(4, APRIL[:10]), [], [], notifications)

    export = svc.export(admin, MONTH)

    assert export.filename == "closing-2026-04.xlsx"
    ws = load_workbook(io.BytesIO(export.content))["月次締め"]
    assert ws["A1"].value == "メンバー"
    assert ws["A2"].value == "佐藤"
    assert ws["B2"].value == "時給制"
    assert ws["F2"].value == 240000
