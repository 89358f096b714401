"""
Report Normalizer - deduplicates environments, suites and tests

Reports assembled from shards, retries or merged partial runs contain the
same logical suite or test several times. Normalization collapses every
such group into a single node, keeps all attempts, rewrites attempt
environment references and drops fields equal to their default values.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..errors import InvalidEnvironmentReference
from ..models.report import (
    Environment,
    Report,
    RunAttempt,
    Suite,
    Test,
    TestStep,
)
from .identity import stable_hash

logger = logging.getLogger(__name__)

# Suite id of tests that live directly on the report.
SUITELESS_ID = "suiteless"


def compute_environment_id(environment: Environment) -> str:
    return stable_hash(environment)


def compute_suite_id(suite: Suite, parent_suite_id: Optional[str] = None) -> str:
    return stable_hash({
        "parentSuiteId": parent_suite_id or "",
        "type": suite.type,
        "file": suite.location.file if suite.location else "",
        "title": suite.title,
    })


def compute_test_id(test: Test, suite_id: str) -> str:
    return stable_hash({
        "suiteId": suite_id,
        "file": test.location.file if test.location else "",
        "title": test.title,
    })


def _append_unique(multimap: Dict[str, Dict[str, None]], key: str, value: str):
    # Dicts keep insertion order, so they double as ordered sets.
    multimap.setdefault(key, {})[value] = None


def _unique(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


class NormalizationContext:
    """
    Identity tables collected while walking one report.

    Nodes are grouped by identity rather than by position in the tree, so
    every occurrence of a logical suite or test lands in the same bucket.
    """

    def __init__(self, environments: List[Environment]):
        self.environment_ids: List[str] = []
        self.environments_by_id: Dict[str, Environment] = {}

        self.root_suite_ids: Dict[str, None] = {}
        self.suites: Dict[str, Suite] = {}
        self.suite_children: Dict[str, Dict[str, None]] = {}
        self.suite_tests: Dict[str, Dict[str, None]] = {}
        self.tests: Dict[str, List[Test]] = {}

        # Environment id -> index in the output array, in first-use order.
        self.environment_index: Dict[str, int] = {}

        for environment in environments:
            env_id = compute_environment_id(environment)
            self.environment_ids.append(env_id)
            self.environments_by_id.setdefault(env_id, environment)

    def resolve_environment(self, attempt: RunAttempt) -> str:
        """Return the identity of the environment an attempt points at."""
        idx = attempt.resolved_environment_idx
        if idx < 0 or idx >= len(self.environment_ids):
            raise InvalidEnvironmentReference(idx, len(self.environment_ids))
        return self.environment_ids[idx]

    def reindex(self, attempt: RunAttempt) -> RunAttempt:
        env_id = self.resolve_environment(attempt)
        if env_id not in self.environment_index:
            self.environment_index[env_id] = len(self.environment_index)
        return attempt.model_copy(
            update={"environment_idx": self.environment_index[env_id]},
            deep=True,
        )

    def used_environments(self) -> List[Environment]:
        return [
            self.environments_by_id[env_id].model_copy(deep=True)
            for env_id in self.environment_index
        ]

    # Collection pass

    def visit_tests(self, tests: Optional[List[Test]], suite_id: str):
        for test in tests or []:
            test_id = compute_test_id(test, suite_id)
            self.tests.setdefault(test_id, []).append(test)
            _append_unique(self.suite_tests, suite_id, test_id)
            for attempt in test.attempts:
                self.resolve_environment(attempt)

    def visit_suite(self, suite: Suite, parent_suite_id: Optional[str] = None) -> str:
        suite_id = compute_suite_id(suite, parent_suite_id)
        self.suites.setdefault(suite_id, suite)
        for child in suite.suites or []:
            child_id = self.visit_suite(child, suite_id)
            _append_unique(self.suite_children, suite_id, child_id)
        self.visit_tests(suite.tests, suite_id)
        return suite_id

    def visit_root_suite(self, suite: Suite):
        suite_id = self.visit_suite(suite)
        self.root_suite_ids[suite_id] = None

    # Emission pass

    def emit_tests(self, test_ids: Iterable[str]) -> List[Test]:
        result = []
        for test_id in test_ids:
            occurrences = self.tests[test_id]
            first = occurrences[0]
            tags = _unique(tag for test in occurrences for tag in test.tags or [])
            result.append(Test(
                title=first.title,
                location=first.location.model_copy() if first.location else None,
                tags=tags or None,
                attempts=[
                    self.reindex(attempt)
                    for test in occurrences
                    for attempt in test.attempts
                ],
            ))
        return result

    def emit_suites(self, suite_ids: Iterable[str]) -> List[Suite]:
        result = []
        for suite_id in suite_ids:
            suite = self.suites[suite_id]
            # Child suites are emitted before tests, matching the visit order.
            children = self.emit_suites(self.suite_children.get(suite_id, {}))
            tests = self.emit_tests(self.suite_tests.get(suite_id, {}))
            result.append(Suite(
                title=suite.title,
                type=suite.type,
                location=suite.location.model_copy() if suite.location else None,
                suites=children,
                tests=tests,
            ))
        return result


def deduplicate_report(report: Report) -> Report:
    """
    Merge duplicate suites, tests and environments of a report.

    The output environment array only holds environments referenced by at
    least one attempt, ordered by first use while walking the merged tree.

    Args:
        report: Report to deduplicate; it is not modified

    Returns:
        New report sharing no nodes with the input

    Raises:
        InvalidEnvironmentReference: if an attempt references a missing environment
    """
    ctx = NormalizationContext(report.environments)

    ctx.visit_tests(report.tests, SUITELESS_ID)
    for suite in report.suites or []:
        ctx.visit_root_suite(suite)

    tests = ctx.emit_tests(ctx.suite_tests.get(SUITELESS_ID, {}))
    suites = ctx.emit_suites(ctx.root_suite_ids)

    logger.debug(
        f"Deduplicated report: {len(report.environments)} -> "
        f"{len(ctx.environment_index)} environments, {len(ctx.tests)} tests"
    )

    return report.model_copy(
        update={
            "environments": ctx.used_environments(),
            "suites": suites,
            "tests": tests,
        },
        deep=True,
    )


def _cleanup_step(step: TestStep) -> TestStep:
    return step.model_copy(update={
        "duration": None if step.duration == 0 else step.duration,
        "steps": [_cleanup_step(s) for s in step.steps] if step.steps else None,
    })


def _cleanup_attempt(attempt: RunAttempt) -> RunAttempt:
    return attempt.model_copy(update={
        "status": None if attempt.status == "passed" else attempt.status,
        "expected_status": None if attempt.expected_status == "passed" else attempt.expected_status,
        "environment_idx": None if attempt.environment_idx == 0 else attempt.environment_idx,
        "duration": None if attempt.duration == 0 else attempt.duration,
        "stdout": attempt.stdout or None,
        "stderr": attempt.stderr or None,
        "annotations": attempt.annotations or None,
        "errors": attempt.errors or None,
        "attachments": attempt.attachments or None,
        "steps": [_cleanup_step(s) for s in attempt.steps] if attempt.steps else None,
    })


def _cleanup_test(test: Test) -> Test:
    return test.model_copy(update={
        "tags": test.tags or None,
        "attempts": [_cleanup_attempt(a) for a in test.attempts],
    })


def _cleanup_suite(suite: Suite) -> Suite:
    return suite.model_copy(update={
        "tests": [_cleanup_test(t) for t in suite.tests] if suite.tests else None,
        "suites": [_cleanup_suite(s) for s in suite.suites] if suite.suites else None,
    })


def strip_defaults(report: Report) -> Report:
    """Drop fields equal to their documented defaults to shrink the JSON."""
    return report.model_copy(update={
        "tests": [_cleanup_test(t) for t in report.tests] if report.tests else None,
        "suites": [_cleanup_suite(s) for s in report.suites] if report.suites else None,
    })


def normalize_report(report: Report) -> Report:
    """
    Normalize a report by deduplicating environments, suites and tests.

    Duplicate suites and tests (same parent, file and title) are merged;
    merged tests keep the union of tags and all attempts. Environments no
    attempt refers to are dropped and attempt references are reindexed.
    Finally, fields equal to their default values are omitted.

    Args:
        report: Report to normalize; it is not modified

    Returns:
        New normalized report
    """
    return strip_defaults(deduplicate_report(report))
