from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Union

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .closing.service import ClosingService
from .contracts.esign import ESignClient, ESignSettings
from .contracts.mysql_contract_repository import MySQLContractRepository
from .contracts.service import ContractService
from .database.connection import Database, DBConfig
from .evaluations.mysql_evaluation_repository import MySQLEvaluationRepository
from .evaluations.service import EvaluationService
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository
from .invoices.service import InvoiceService
from .members.mysql_member_repository import MySQLMemberRepository
from .members.mysql_tool_repository import MySQLToolRepository
from .members.service import MemberService, ToolService
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mailer import Mailer, SMTPSettings
from .notifications.service import NotificationService
from .notifications.slack import SlackNotifier
from .pl_records.mysql_pl_record_repository import MySQLPLRecordRepository
from .pl_records.service import PLService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .self_reports.mysql_self_report_repository import MySQLSelfReportRepository
from .self_reports.service import SelfReportService
from .skills.mysql_skill_repository import MySQLSkillRepository
from .skills.service import SkillService
from .system_configs.mysql_system_config_repository import MySQLSystemConfigRepository
from .system_configs.service import SystemConfigService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    db: Database
    dispatcher: NotificationDispatcher

    auth_service: AuthService
    member_service: MemberService
    tool_service: ToolService
    skill_service: SkillService
    attendance_service: AttendanceService
    project_service: ProjectService
    schedule_service: ScheduleService
    system_config_service: SystemConfigService
    notification_service: NotificationService
    invoice_service: InvoiceService
    closing_service: ClosingService
    evaluation_service: EvaluationService
    self_report_service: SelfReportService
    pl_service: PLService
    contract_service: ContractService


def build_container(settings: Union[ModuleType, object]) -> Container:
    """Wire repositories and services from a settings module."""
    db = Database(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))

    users_repo = MySQLUserRepository(db)
    members_repo = MySQLMemberRepository(db)
    tools_repo = MySQLToolRepository(db)
    skills_repo = MySQLSkillRepository(db)
    attendance_repo = MySQLAttendanceRepository(db)
    projects_repo = MySQLProjectRepository(db)
    schedules_repo = MySQLScheduleRepository(db)
    configs_repo = MySQLSystemConfigRepository(db)
    invoices_repo = MySQLInvoiceRepository(db)
    evaluations_repo = MySQLEvaluationRepository(db)
    self_reports_repo = MySQLSelfReportRepository(db)
    pl_repo = MySQLPLRecordRepository(db)
    contracts_repo = MySQLContractRepository(db)

    system_config_service = SystemConfigService(configs_repo)

    slack_settings = dict(getattr(settings, "SLACK", {}) or {})
    dispatcher = NotificationDispatcher(background=bool(getattr(settings, "NOTIFY_ASYNC", True)))
    notification_service = NotificationService(
        SlackNotifier(
            bot_token=slack_settings.get("bot_token"),
            channels=slack_settings.get("channels", {}),
            channel_lookup=system_config_service.lookup,
        ),
        Mailer(SMTPSettings.from_dict(dict(getattr(settings, "SMTP", {}) or {}))),
        dispatcher,
    )

    esign = ESignClient(ESignSettings.from_dict(dict(getattr(settings, "DOCUSIGN", {}) or {})))

    return Container(
        db=db,
        dispatcher=dispatcher,
        auth_service=AuthService(users_repo),
        member_service=MemberService(members_repo, skills_repo),
        tool_service=ToolService(tools_repo, members_repo),
        skill_service=SkillService(skills_repo, members_repo),
        attendance_service=AttendanceService(attendance_repo, notification_service),
        project_service=ProjectService(projects_repo, members_repo),
        schedule_service=ScheduleService(
            schedules_repo, attendance_repo, members_repo, projects_repo, notification_service
        ),
        system_config_service=system_config_service,
        notification_service=notification_service,
        invoice_service=InvoiceService(
            invoices_repo,
            members_repo,
            notification_service,
            system_config_service,
            accounting_email=getattr(settings, "ACCOUNTING_EMAIL", None),
        ),
        closing_service=ClosingService(
            members_repo, attendance_repo, schedules_repo, invoices_repo, notification_service
        ),
        evaluation_service=EvaluationService(evaluations_repo, members_repo),
        self_report_service=SelfReportService(self_reports_repo, members_repo, projects_repo),
        pl_service=PLService(pl_repo, self_reports_repo, members_repo, tools_repo, projects_repo, invoices_repo),
        contract_service=ContractService(contracts_repo, members_repo, esign),
    )
