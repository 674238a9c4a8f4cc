from __future__ import annotations

from datetime import date, datetime

import pytest

from src.teamops.teamops.core.enums import Company, MemberStatus, ProjectStatus, ProjectType, SalaryType
from src.teamops.teamops.core.exceptions import NotFoundError
from src.teamops.teamops.members.model import Member
from src.teamops.teamops.projects.model import Project
from src.teamops.teamops.self_reports.model import SelfReport
from src.teamops.teamops.self_reports.schemas import SelfReportSubmit
from src.teamops.teamops.self_reports.service import SelfReportService

SUBMITTED = datetime(2026, 4, 30, 18, 0)


class InMemoryReports:
    def __init__(self):
        self.rows: list[SelfReport] = []

    def list_for_month(self, month, member_id=None):
        return [r for r in self.rows if r.target_month == month and (member_id is None or r.member_id == member_id)]

    def upsert_many(self, member_id, month, allocations, *, submitted_at):
        self.rows = [r for r in self.rows if not (r.member_id == member_id and r.target_month == month)]
        for a in allocations:
            self.rows.append(
                SelfReport(
                    report_id=len(self.rows) + 1,
                    member_id=member_id,
                    target_month=month,
                    project_id=a.project_id,
                    reported_hours=a.reported_hours,
                    project_name=f"p{a.project_id}",
                    submitted_at=submitted_at,
                )
            )
        return len(allocations)


class InMemoryProjects:
    def get_projects(self, project_ids):
        return [
            Project(
                project_id=pid,
                name=f"p{pid}",
                status=ProjectStatus.ACTIVE,
                company=Company.BOOST,
                project_type=ProjectType.BOOST_DISPATCH,
                start_date=date(2026, 1, 1),
            )
            for pid in project_ids
            if pid in (10, 20)
        ]


class InMemoryMembers:
    def list_not_deleted(self):
        return [
            Member(
                member_id=mid,
                name=name,
                status=MemberStatus.EMPLOYEE,
                company=Company.BOOST,
                salary_type=SalaryType.MONTHLY,
                salary_amount=200000,
                joined_at=date(2025, 4, 1),
            )
            for mid, name in ((3, "山田"), (4, "佐藤"))
        ]


@pytest.fixture
def repo():
    return InMemoryReports()


@pytest.fixture
def service(repo):
    return SelfReportService(repo, InMemoryMembers(), InMemoryProjects())


def _submit(*allocations):
    return SelfReportSubmit.model_validate(
        {"targetMonth": "2026-04", "allocations": [{"projectId": p, "reportedHours": h} for p, h in allocations]}
    )


def test_staff_view_lists_every_member_with_totals(service, member, manager):
    service.submit(member, _submit((10, 100), (20, 60.5)), now=SUBMITTED)

    rows = {r["memberId"]: r for r in service.monthly(manager, "2026-04")}

    assert rows[3]["submitted"] is True
    assert rows[3]["totalHours"] == 160.5
    assert rows[3]["submittedAt"] == SUBMITTED.isoformat()
    assert rows[4] == {
        "memberId": 4, "memberName": "佐藤", "submitted": False, "totalHours": 0, "submittedAt": None, "projects": []
    }


def test_member_view_is_own_rows(service, member):
    service.submit(member, _submit((10, 80)), now=SUBMITTED)

    [row] = service.monthly(member, "2026-04")

    assert row["projectId"] == 10
    assert row["reportedHours"] == 80


def test_resubmission_replaces_allocations(service, repo, member):
    service.submit(member, _submit((10, 80)), now=SUBMITTED)
    service.submit(member, _submit((20, 40)), now=SUBMITTED)

    assert [(r.project_id, r.reported_hours) for r in repo.rows] == [(20, 40)]


def test_unknown_project_is_rejected_with_details(service, member):
    with pytest.raises(NotFoundError) as exc:
        service.submit(member, _submit((10, 80), (99, 10)), now=SUBMITTED)

    assert exc.value.details == {"projectIds": [99]}
