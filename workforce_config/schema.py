"""
WorkforceConfigurationSet schema.

The human-authored, reviewable source artifact for workforce
configuration.  YAML fragments are parsed into these types by the loader;
the bridges turn them into kernel rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class LeaveCategoryDef:
    """One leave category as declared in configuration."""

    name: str
    default_allocation: Decimal
    is_paid: bool = True
    requires_approval: bool = True
    requires_attachment: bool = False


@dataclass(frozen=True)
class WorkforceConfigurationSet:
    """
    A complete, validated configuration set.

    ``checksum`` is the SHA-256 of the canonical JSON of every fragment and
    identifies the set in logs.
    """

    config_id: str
    version: int
    leave_categories: tuple[LeaveCategoryDef, ...]
    checksum: str
    description: str = ""

    def category(self, name: str) -> LeaveCategoryDef:
        for category in self.leave_categories:
            if category.name == name:
                return category
        raise KeyError(f"No leave category named {name!r} in {self.config_id}")
