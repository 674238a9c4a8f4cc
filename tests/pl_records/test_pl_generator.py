from __future__ import annotations

from datetime import date

import pytest

from src.teamops.teamops.core.enums import Company, MemberStatus, ProjectStatus, ProjectType, SalaryType
from src.teamops.teamops.core.exceptions import AuthorizationError, ValidationError
from src.teamops.teamops.members.model import Member
from src.teamops.teamops.pl_records.generator import ExistingAdjustment, build_record, costs_by_project
from src.teamops.teamops.pl_records.model import gross_profit_rate
from src.teamops.teamops.pl_records.service import PLService
from src.teamops.teamops.projects.model import Project
from src.teamops.teamops.self_reports.model import SelfReport

MONTH = "2026-04"


def _member(member_id, salary_type, amount):
    return Member(
        member_id=member_id,
        name=f"m{member_id}",
        status=MemberStatus.EMPLOYEE,
        company=Company.BOOST,
        salary_type=salary_type,
        salary_amount=amount,
        joined_at=date(2025, 4, 1),
    )


def _project(project_id, project_type, amount=0):
    return Project(
        project_id=project_id,
        name=f"p{project_id}",
        status=ProjectStatus.ACTIVE,
        company=Company.BOOST,
        project_type=project_type,
        start_date=date(2026, 1, 1),
        monthly_contract_amount=amount,
    )


HOURLY = _member(1, SalaryType.HOURLY, 2000)
MONTHLY = _member(2, SalaryType.MONTHLY, 300000)
DISPATCH = _project(10, ProjectType.BOOST_DISPATCH)
OWN = _project(20, ProjectType.SALT2_OWN, 500000)

REPORTS = [
    SelfReport(report_id=1, member_id=1, target_month=MONTH, project_id=10, reported_hours=100),
    SelfReport(report_id=2, member_id=1, target_month=MONTH, project_id=20, reported_hours=50),
    SelfReport(report_id=3, member_id=2, target_month=MONTH, project_id=10, reported_hours=120),
    SelfReport(report_id=4, member_id=2, target_month=MONTH, project_id=20, reported_hours=40),
]
TOOLS = {1: 15000, 2: 8000}


def test_costs_split_by_salary_type_and_hour_share():
    costs = costs_by_project(REPORTS, {1: HOURLY, 2: MONTHLY}, TOOLS)

    assert (costs[10].labor, costs[10].tools) == (425000, 16000)
    assert (costs[20].labor, costs[20].tools) == (175000, 7000)


def test_dispatch_revenue_defaults_to_breakeven_markup():
    costs = costs_by_project(REPORTS, {1: HOURLY, 2: MONTHLY}, TOOLS)

    row = build_record(DISPATCH, costs[10], expense=5000, existing=None)

    assert row.cost_other == 5000
    assert row.revenue_contract == 446000
    assert row.gross_profit == 0
    assert row.markup_rate == pytest.approx(430000 / 425000)


def test_dispatch_uses_stored_markup_and_other_cost():
    costs = costs_by_project(REPORTS, {1: HOURLY, 2: MONTHLY}, TOOLS)

    row = build_record(DISPATCH, costs[10], expense=5000, existing=ExistingAdjustment(markup_rate=1.2, cost_other=3000))

    assert row.revenue_contract == 526000
    assert row.gross_profit == 77000
    assert row.gross_profit_rate == 14.64


def test_own_project_revenue_is_contract_amount():
    costs = costs_by_project(REPORTS, {1: HOURLY, 2: MONTHLY}, TOOLS)

    row = build_record(OWN, costs[20], expense=0, existing=None)

    assert row.revenue_contract == 500000
    assert row.gross_profit == 318000
    assert row.gross_profit_rate == 63.6
    assert row.markup_rate is None


def test_gross_profit_rate_without_revenue_is_zero():
    assert gross_profit_rate(-1000, 0) == 0.0


class FakeReports:
    def __init__(self, reports):
        self.reports = reports

    def list_for_month(self, month, member_id=None):
        return list(self.reports)


class FakeMembers:
    def __init__(self, members):
        self.members = members

    def list_not_deleted(self):
        return list(self.members)


class FakeTools:
    def monthly_totals(self, member_ids):
        return {k: v for k, v in TOOLS.items() if k in member_ids}


class FakeProjects:
    def get_projects(self, project_ids):
        return [p for p in (DISPATCH, OWN) if p.project_id in project_ids]


class FakeInvoices:
    def expense_totals_by_project(self, month, project_ids):
        return {10: 5000}


class FakeRecords:
    def __init__(self):
        self.saved = []

    def adjustments(self, month, project_ids):
        return {}

    def save_generated(self, month, rows, *, actor_id):
        self.saved.extend(rows)
        return len(rows)


def _service(reports, members, records):
    return PLService(records, FakeReports(reports), FakeMembers(members), FakeTools(), FakeProjects(), FakeInvoices())


def test_generate_excludes_reports_of_deleted_members(admin):
    records = FakeRecords()
    svc = _service(REPORTS, [HOURLY], records)

    result = svc.generate(admin, MONTH)

    assert result["generated"] == 2
    by_project = {r.project_id: r for r in records.saved}
    assert by_project[10].cost_labor_hourly == 200000
    assert by_project[20].cost_labor_hourly == 100000


def test_generate_without_reports_reports_nothing(admin):
    result = _service([], [], FakeRecords()).generate(admin, MONTH)

    assert result == {"message": "自己申告データがありません", "generated": 0}


def test_generate_is_admin_only(manager):
    with pytest.raises(AuthorizationError):
        _service(REPORTS, [HOURLY], FakeRecords()).generate(manager, MONTH)


def test_list_requires_a_valid_month(admin):
    with pytest.raises(ValidationError):
        _service([], [], FakeRecords()).list(admin, months=["2026-4"])
