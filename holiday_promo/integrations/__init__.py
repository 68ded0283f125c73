"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_database,
    check_image_generator,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_database",
    "check_image_generator",
    "run_all_checks",
]
