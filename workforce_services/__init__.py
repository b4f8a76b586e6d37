"""
workforce_services -- Package init and public API.

Responsibility:
    Composes the kernel services for one database session and exposes the
    operations a portal calls.

Architecture position:
    Services -- above the kernel and the configuration package.

    Dependency direction (enforced by tests/architecture/test_workforce_boundaries.py):
        workforce_services/ -> workforce_kernel/   (allowed)
        workforce_services/ -> workforce_config/   (allowed)
        workforce_kernel/   -> workforce_services/ (FORBIDDEN)
"""

from workforce_services.approval_engine import ApprovalEngine

__all__ = ["ApprovalEngine"]
