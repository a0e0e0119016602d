"""
Monitoring infrastructure (logging).
"""

from troqueur.infrastructure.monitoring.logger import (
    JSONFormatter,
    get_logger,
    instruction_id_ctx,
    instruction_scope,
    setup_logging,
)

__all__ = [
    "JSONFormatter",
    "get_logger",
    "instruction_id_ctx",
    "instruction_scope",
    "setup_logging",
]
