"""
Utilities package for check-domains.

Cross-cutting helpers only; keep domain logic out of here.
"""

from check_domains.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
