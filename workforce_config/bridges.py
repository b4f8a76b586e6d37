"""
Config -> Kernel Bridges.

Functions that turn a ``WorkforceConfigurationSet`` into kernel rows.  They
live here, in the producer, because the kernel must never import
``workforce_config``.

Usage:
    config = get_active_config()
    with session_scope() as session:
        categories = seed_leave_categories(session, config)
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workforce_config.schema import WorkforceConfigurationSet
from workforce_kernel.domain.leave import LeaveCategory
from workforce_kernel.domain.values import SYSTEM_ACTOR_ID
from workforce_kernel.logging_config import get_logger
from workforce_kernel.models.leave import LeaveCategoryModel

logger = get_logger("config.bridges")


def seed_leave_categories(
    session: Session,
    config: WorkforceConfigurationSet,
    actor_id: UUID = SYSTEM_ACTOR_ID,
) -> list[LeaveCategory]:
    """
    Upsert one ``leave_categories`` row per configured category, by name.

    Existing rows get their policy flags and default allocation updated.
    Existing ledger rows are not touched: a changed allocation only
    applies to rows provisioned afterwards.  Flushes; never commits.
    """
    existing = {
        row.name: row
        for row in session.execute(select(LeaveCategoryModel)).scalars()
    }

    created = 0
    for definition in config.leave_categories:
        row = existing.get(definition.name)
        if row is None:
            row = LeaveCategoryModel(name=definition.name, created_by_id=actor_id)
            session.add(row)
            existing[definition.name] = row
            created += 1
        else:
            row.updated_by_id = actor_id
        row.is_paid = definition.is_paid
        row.requires_approval = definition.requires_approval
        row.requires_attachment = definition.requires_attachment
        row.default_allocation = definition.default_allocation

    session.flush()
    logger.info(
        "leave_categories_seeded",
        extra={
            "config_id": config.config_id,
            "checksum": config.checksum,
            "created_count": created,
            "total": len(config.leave_categories),
        },
    )
    return [existing[d.name].to_dto() for d in config.leave_categories]
