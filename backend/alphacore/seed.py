"""Seed & Data Fix - populate a fresh database, or repair an existing one.

Invariants:
    - seed wipes every table (children first) before inserting, so it is repeatable
    - fix never deletes: it promotes users to ADMIN and adds missing project members

Usage:
    alphacore-seed            # wipe + sample data
    alphacore-seed --fix      # promote everyone to ADMIN, join everyone to every project
"""

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.config import get_settings
from alphacore.core.domain_types import ProjectRole, UserRole
from alphacore.db.session import create_session_factory
from alphacore.infrastructure.observability import setup_logging
from alphacore.infrastructure.security import hash_password
from alphacore.models import (
    ActivityLog, Category, Invoice, InvoiceItem, Label, Project,
    ProjectMember, ReportSchedule, Task, TaskComment, Transaction, User,
    task_labels,
)

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "admin123"

SEED_USERS = [
    ("Muhammet İkbal Köç", "ikbal80koc@gmail.com"),
    ("Abdulmelik Eymen Alpat", "eymenalpat0@gmail.com"),
]

SEED_CATEGORIES = [
    ("Müşteri Ödemesi", "INCOME", "#22c55e", "banknote"),
    ("Danışmanlık", "INCOME", "#3b82f6", "briefcase"),
    ("Abonelik Geliri", "INCOME", "#8b5cf6", "repeat"),
    ("Diğer Gelir", "INCOME", "#06b6d4", "plus-circle"),
    ("Kira", "EXPENSE", "#ef4444", "home"),
    ("Maaş", "EXPENSE", "#f97316", "users"),
    ("Yazılım Lisansları", "EXPENSE", "#eab308", "code"),
    ("Ofis Giderleri", "EXPENSE", "#ec4899", "building"),
    ("Pazarlama", "EXPENSE", "#14b8a6", "megaphone"),
    ("Diğer Gider", "EXPENSE", "#6b7280", "minus-circle"),
]

SEED_LABELS = [
    ("Acil", "#ef4444"),
    ("Hata", "#f97316"),
    ("Geliştirme", "#3b82f6"),
    ("Tasarım", "#8b5cf6"),
    ("Dokümantasyon", "#06b6d4"),
    ("İyileştirme", "#22c55e"),
]

SEED_TASKS = [
    ("Tasarım prototipi hazırla", "DONE", "HIGH"),
    ("Ana sayfa geliştirmesi", "IN_PROGRESS", "HIGH"),
    ("API entegrasyonu", "TODO", "MEDIUM"),
    ("Mobil uyumluluk testleri", "BACKLOG", "LOW"),
    ("SEO optimizasyonu", "BACKLOG", "MEDIUM"),
]

# (type, amount, description, days ago, category name)
SEED_TRANSACTIONS = [
    ("INCOME", 50000, "Proje A - İlk ödeme", 2, "Müşteri Ödemesi"),
    ("INCOME", 25000, "Danışmanlık hizmeti", 5, "Danışmanlık"),
    ("EXPENSE", 15000, "Ofis kirası - Ocak", 1, "Kira"),
    ("EXPENSE", 35000, "Maaş ödemeleri", 3, "Maaş"),
    ("INCOME", 10000, "Abonelik yenileme", 7, "Abonelik Geliri"),
    ("EXPENSE", 5000, "Yazılım lisansları", 4, "Yazılım Lisansları"),
]


async def wipe(db: AsyncSession) -> None:
    """Delete every row, children before parents."""
    await db.execute(delete(task_labels))
    for model in (
        TaskComment, Task, ProjectMember, Project, InvoiceItem, Invoice,
        Transaction, Category, Label, ActivityLog, ReportSchedule, User,
    ):
        await db.execute(delete(model))


async def seed(db: AsyncSession, password: str = DEFAULT_PASSWORD) -> dict:
    """Wipe and insert the sample workspace. Returns row counts."""
    await wipe(db)
    now = datetime.now(timezone.utc)

    users = [
        User(
            name=name, email=email, hashed_password=hash_password(password),
            role=UserRole.ADMIN.value,
        )
        for name, email in SEED_USERS
    ]
    owner, member = users
    categories = {
        name: Category(name=name, type=type_, color=color, icon=icon)
        for name, type_, color, icon in SEED_CATEGORIES
    }
    labels = [Label(name=name, color=color) for name, color in SEED_LABELS]
    db.add_all([*users, *categories.values(), *labels])
    await db.flush()

    project = Project(
        name="Web Sitesi Yenileme",
        description="Şirket web sitesinin yeniden tasarlanması ve geliştirilmesi",
        status="ACTIVE",
        color="#3b82f6",
        start_date=now,
        end_date=now + timedelta(days=90),
        members=[
            ProjectMember(user_id=owner.id, role=ProjectRole.OWNER.value),
            ProjectMember(user_id=member.id, role=ProjectRole.MEMBER.value),
        ],
    )
    db.add(project)
    await db.flush()

    db.add_all([
        Task(
            title=title, status=status, priority=priority, order=i,
            project_id=project.id, creator_id=owner.id, assignee_id=member.id,
        )
        for i, (title, status, priority) in enumerate(SEED_TASKS)
    ])
    db.add_all([
        Transaction(
            type=type_, amount=amount, description=description,
            date=now - timedelta(days=days_ago),
            category_id=categories[category].id, user_id=owner.id,
        )
        for type_, amount, description, days_ago, category in SEED_TRANSACTIONS
    ])
    await db.commit()

    counts = {
        "users": len(users),
        "categories": len(categories),
        "labels": len(labels),
        "projects": 1,
        "tasks": len(SEED_TASKS),
        "transactions": len(SEED_TRANSACTIONS),
    }
    logger.info(f"Seed completed: {counts}")
    return counts


async def fix_data(db: AsyncSession) -> dict:
    """Promote every user to ADMIN and add everyone missing from a project as MEMBER."""
    users = (await db.execute(select(User))).scalars().all()
    promoted = 0
    for user in users:
        if user.role != UserRole.ADMIN.value:
            user.role = UserRole.ADMIN.value
            promoted += 1
            logger.info(f"{user.email} -> ADMIN")

    added = 0
    projects = (await db.execute(
        select(Project).execution_options(populate_existing=True),
    )).scalars().all()
    for project in projects:
        existing = {m.user_id for m in project.members}
        for user in users:
            if user.id not in existing:
                db.add(ProjectMember(
                    project_id=project.id, user_id=user.id,
                    role=ProjectRole.MEMBER.value,
                ))
                added += 1
                logger.info(f"Added {user.email} to project '{project.name}' as MEMBER")

    await db.commit()
    return {"promoted": promoted, "memberships_added": added}


async def _run(fix: bool, password: str) -> None:
    settings = get_settings()
    factory = create_session_factory(settings.database_url)
    async with factory() as db:
        if fix:
            result = await fix_data(db)
        else:
            result = await seed(db, password)
    logger.info(f"Done: {result}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed or repair the Alphacore database.")
    parser.add_argument(
        "--fix", action="store_true",
        help="promote all users to ADMIN and add them to every project",
    )
    parser.add_argument(
        "--password", default=DEFAULT_PASSWORD,
        help="password for the seeded accounts",
    )
    args = parser.parse_args()
    setup_logging("INFO", "text")
    asyncio.run(_run(args.fix, args.password))


if __name__ == "__main__":
    main()
