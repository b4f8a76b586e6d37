"""
Configuration Loader (``workforce_config.loader``).

Responsibility
--------------
Loads the YAML fragments of one configuration set and parses them into
the frozen dataclasses of ``workforce_config.schema``.  Runtime callers go
through ``workforce_config.get_active_config()`` instead.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with a descriptive
  message; required fields never get silent defaults.
* Allocations are parsed as ``Decimal`` from their string form.
* ``compute_checksum`` is deterministic over the assembled data.

Failure modes
-------------
* Missing ``root.yaml``  -> ``FileNotFoundError``.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Duplicate category names or negative allocations  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from workforce_config.schema import LeaveCategoryDef, WorkforceConfigurationSet

ROOT_FILE = "root.yaml"
CATEGORIES_FILE = "leave_categories.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"{field_name} must be a decimal number, got {value!r}") from None


def parse_leave_category(data: dict[str, Any]) -> LeaveCategoryDef:
    """
    Parse a ``LeaveCategoryDef`` from a dict.

    Raises:
        KeyError: if ``name`` or ``default_allocation`` is missing.
        ValueError: if the allocation is not a non-negative number.
    """
    allocation = parse_decimal(data["default_allocation"], "default_allocation")
    if allocation < 0:
        raise ValueError(
            f"Leave category {data['name']!r} has negative allocation {allocation}"
        )
    return LeaveCategoryDef(
        name=data["name"],
        default_allocation=allocation,
        is_paid=bool(data.get("is_paid", True)),
        requires_approval=bool(data.get("requires_approval", True)),
        requires_attachment=bool(data.get("requires_attachment", False)),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_configuration_set(fragment_dir: Path) -> WorkforceConfigurationSet:
    """
    Assemble one configuration set from its fragment directory.

    Fragment structure::

        sets/default/
        +-- root.yaml              # config_id, version, description
        +-- leave_categories.yaml  # leave_categories: [...]
    """
    root_path = fragment_dir / ROOT_FILE
    if not root_path.exists():
        raise FileNotFoundError(f"Configuration set has no {ROOT_FILE}: {fragment_dir}")

    root = load_yaml_file(root_path)
    categories_path = fragment_dir / CATEGORIES_FILE
    categories_data = (
        load_yaml_file(categories_path).get("leave_categories", [])
        if categories_path.exists()
        else []
    )

    categories = tuple(parse_leave_category(item) for item in categories_data)
    names = [category.name for category in categories]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate leave category names: {duplicates}")

    checksum = compute_checksum({"root": root, "leave_categories": categories_data})

    return WorkforceConfigurationSet(
        config_id=root["config_id"],
        version=int(root["version"]),
        leave_categories=categories,
        checksum=checksum,
        description=root.get("description", ""),
    )
