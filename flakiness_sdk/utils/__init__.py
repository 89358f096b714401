"""Utilities package"""
from .helpers import strip_ansi, visit_tests
from .ci import ci_run_url, create_environment, detect_system_data

__all__ = ["strip_ansi", "visit_tests", "ci_run_url", "create_environment", "detect_system_data"]
