"""ORM Models - SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every timestamp is stored in UTC

Design Decisions:
    - One file per aggregate for locality (parent + owned children together)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from alphacore.models.user import User  # noqa: F401
from alphacore.models.category import Category  # noqa: F401
from alphacore.models.transaction import Transaction  # noqa: F401
from alphacore.models.invoice import Invoice, InvoiceItem  # noqa: F401
from alphacore.models.project import Project, ProjectMember  # noqa: F401
from alphacore.models.task import Task, TaskComment, Label, task_labels  # noqa: F401
from alphacore.models.activity_log import ActivityLog  # noqa: F401
from alphacore.models.report_schedule import ReportSchedule  # noqa: F401
