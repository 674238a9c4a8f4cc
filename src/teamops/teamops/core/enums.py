from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"

    @classmethod
    def normalize(cls, value: str) -> "Role":
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MEMBER


class Company(str, Enum):
    BOOST = "boost"
    SALT2 = "salt2"


class MemberStatus(str, Enum):
    """Employment status of a member."""

    EXECUTIVE = "executive"
    EMPLOYEE = "employee"
    INTERN_FULL = "intern_full"
    INTERN_TRAINING = "intern_training"
    TRAINING_MEMBER = "training_member"

    def default_role(self) -> Role:
        if self is MemberStatus.EXECUTIVE:
            return Role.ADMIN
        if self is MemberStatus.EMPLOYEE:
            return Role.MANAGER
        return Role.MEMBER


class SalaryType(str, Enum):
    HOURLY = "hourly"
    MONTHLY = "monthly"


class LocationType(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"


class AttendanceStatus(str, Enum):
    """Stored record status of an attendance row."""

    NORMAL = "normal"
    MODIFIED = "modified"
    ABSENT = "absent"


class ConfirmStatus(str, Enum):
    """Review state of an attendance row."""

    UNCONFIRMED = "unconfirmed"
    CONFIRMED = "confirmed"
    APPROVED = "approved"
    REJECTED = "rejected"


class DisplayStatus(str, Enum):
    """Read-side status, derived from stored fields on every read."""

    NOT_STARTED = "not_started"
    WORKING = "working"
    DONE = "done"
    ABSENT = "absent"


class ClosingConfirmStatus(str, Enum):
    NOT_SENT = "not_sent"
    WAITING = "waiting"
    CONFIRMED = "confirmed"
    # Reserved; the closing computation never produces it.
    FORCED = "forced"


class InvoiceStatus(str, Enum):
    """Stored invoice lifecycle. Draft means generated but never sent."""

    DRAFT = "draft"
    SENT = "sent"
    CONFIRMED = "confirmed"


class ClosingInvoiceStatus(str, Enum):
    NONE = "none"
    GENERATED = "generated"
    SENT = "sent"
    ACCOUNTING_SENT = "accounting_sent"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class ProjectType(str, Enum):
    BOOST_DISPATCH = "boost_dispatch"
    SALT2_OWN = "salt2_own"


class ProjectContractType(str, Enum):
    QUASI_MANDATE = "quasi_mandate"
    CONTRACT = "contract"
    IN_HOUSE = "in_house"
    OTHER = "other"


class ContractStatus(str, Enum):
    """E-signature contract lifecycle."""

    DRAFT = "draft"
    SENT = "sent"
    WAITING_SIGN = "waiting_sign"
    COMPLETED = "completed"
    VOIDED = "voided"


class NotificationChannel(str, Enum):
    SCHEDULE = "schedule"
    ATTENDANCE = "attendance"
    DEFAULT = "default"
