"""Domain Types - enums that replace bare strings across the codebase.

Invariants:
    - All valid states encoded as Enums - no raw string matching in logic
    - TaskStatus declaration order IS the kanban column order
    - Enum values are the persisted column values

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - Stored as String columns (not native DB enums): adding a value needs no migration
"""

from enum import Enum


class UserRole(str, Enum):
    """Workspace-wide role. ADMIN bypasses per-record scoping."""
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class ProjectStatus(str, Enum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ProjectRole(str, Enum):
    """Per-project role. VIEWER is read-only."""
    OWNER = "OWNER"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class TaskStatus(str, Enum):
    """Kanban columns, left to right."""
    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ReportFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class ActivityAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    GENERATED = "generated"


class EntityType(str, Enum):
    """entity_type values written to the activity log."""
    USER = "user"
    PROJECT = "project"
    TASK = "task"
    TRANSACTION = "transaction"
    INVOICE = "invoice"
    REPORT_SCHEDULE = "report_schedule"
    REPORT = "report"
