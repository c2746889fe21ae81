"""Generate module - Test log file generation."""

from .generate_test_logs import generate_test_logs

__all__ = ["generate_test_logs"]
