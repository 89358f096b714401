"""
Utility helper functions
"""
import re
from typing import Callable, List

from ..models.report import Report, Suite, Test

ANSI_REGEX = re.compile(
    r"[\x1b\x9b][\[\]()#;?]*"
    r"(?:(?:(?:[a-zA-Z\d]*(?:;[-a-zA-Z\d/#&.:=?%@~_]*)*)?\x07)"
    r"|(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PR-TZcf-ntqry=><~]))"
)


def strip_ansi(text: str) -> str:
    """
    Remove ANSI escape codes (colors, cursor movement) from a string.

    Args:
        text: Terminal output

    Returns:
        Text without escape codes
    """
    return ANSI_REGEX.sub("", text)


def visit_tests(report: Report, visitor: Callable[[Test, List[Suite]], None]):
    """
    Call ``visitor(test, parent_suites)`` for every test of a report.

    Top-level tests come first with no parents; then each suite is walked
    depth-first, its own tests before its child suites. ``parent_suites``
    runs from the outermost suite to the immediate parent and is reused
    between calls, so copy it to keep it.

    Args:
        report: Report to walk
        visitor: Callback
    """
    parents: List[Suite] = []

    def visit_suite(suite: Suite):
        parents.append(suite)
        for test in suite.tests or []:
            visitor(test, parents)
        for child in suite.suites or []:
            visit_suite(child)
        parents.pop()

    for test in report.tests or []:
        visitor(test, [])
    for suite in report.suites or []:
        visit_suite(suite)
