"""
workforce_config -- single public entrypoint for workforce configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``WorkforceConfigurationSet``
    holding the leave categories and their default allocations.

Architecture position:
    Configuration -- sits above ``workforce_kernel``.  The kernel MUST
    NEVER import from ``workforce_config``; ``bridges`` translates a
    configuration set into kernel rows.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the requested name.
    - ``ValueError`` / ``KeyError`` -- malformed fragments.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``WORKFORCE_CONFIG_TRACE`` log entry with the config id, version and
    checksum.
"""

from __future__ import annotations

from pathlib import Path

from workforce_config.loader import load_configuration_set
from workforce_config.schema import LeaveCategoryDef, WorkforceConfigurationSet
from workforce_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = [
    "LeaveCategoryDef",
    "WorkforceConfigurationSet",
    "get_active_config",
]


def get_active_config(
    set_name: str = "default",
    config_dir: Path | None = None,
) -> WorkforceConfigurationSet:
    """The ONLY public configuration entrypoint.

    Args:
        set_name: Subdirectory of the sets directory to load.
        config_dir: Override path to the sets directory.  Defaults to
            workforce_config/sets/.

    Raises:
        FileNotFoundError: If the set does not exist.
        ValueError: If a fragment fails validation.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    fragment_dir = sets_dir / set_name
    if not fragment_dir.is_dir():
        raise FileNotFoundError(f"Configuration set not found: {fragment_dir}")

    config = load_configuration_set(fragment_dir)

    _logger.info(
        "WORKFORCE_CONFIG_TRACE",
        extra={
            "trace_type": "WORKFORCE_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "leave_category_count": len(config.leave_categories),
        },
    )
    return config
