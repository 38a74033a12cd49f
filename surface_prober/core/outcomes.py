"""
Decision rules over probe outcomes.

The browser only reports what happened (a value, or the name and message of
what was thrown). Whether that means "supported", "static", "callable" or
"constructible" is decided here, so each rule can be tested by feeding it a
synthetic outcome instead of a real browser.
"""
from typing import Any, Iterable, List

from surface_prober.config import (
    CALL_EXPRESSION,
    GETTER_REJECTION_ERROR,
    MEMBER_EXPRESSION,
    NEEDS_NEW_MARKERS,
    NEW_EXPRESSION,
    NOT_A_CONSTRUCTOR_MARKERS,
)
from surface_prober.core.models import ProbeOutcome, ShapeReport


EXPECTED = "expected"
UNEXPECTED = "unexpected"


class DatasetInconsistencyError(Exception):
    """A declared global is missing but its lowercase twin exists."""

    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


def parse_outcome(raw: Any) -> ProbeOutcome:
    return raw if isinstance(raw, ProbeOutcome) else ProbeOutcome.model_validate(raw)


def _mentions(outcome: ProbeOutcome, markers: Iterable[str]) -> bool:
    message = outcome.message or ""
    return any(marker in message for marker in markers)


def is_getter_rejection(outcome: ProbeOutcome) -> bool:
    # ex. "The HTMLInputElement.indeterminate getter can only be used on instances of HTMLInputElement"
    return outcome.failed and outcome.name == GETTER_REJECTION_ERROR


def is_needs_new(outcome: ProbeOutcome) -> bool:
    return outcome.failed and _mentions(outcome, NEEDS_NEW_MARKERS)


def is_not_a_constructor(outcome: ProbeOutcome) -> bool:
    return outcome.failed and _mentions(outcome, NOT_A_CONSTRUCTOR_MARKERS)


# ----------------------------------------------------------------------
# Support / static
# ----------------------------------------------------------------------

def _raise_if_inconsistent(outcome: ProbeOutcome):
    if outcome.status == "inconsistent":
        raise DatasetInconsistencyError([outcome.message or outcome.id])


def is_supported(outcome: ProbeOutcome) -> bool:
    _raise_if_inconsistent(outcome)
    if outcome.ok:
        return bool(outcome.value)
    return is_getter_rejection(outcome)


def is_static(outcome: ProbeOutcome) -> bool:
    _raise_if_inconsistent(outcome)
    if outcome.ok:
        return bool(outcome.value)
    return is_getter_rejection(outcome)


def css_is_supported(outcome: ProbeOutcome) -> bool:
    return outcome.ok and bool(outcome.value)


def classify_error(outcome: ProbeOutcome, kind: str) -> str | None:
    """
    Label a failed outcome as EXPECTED (it carries meaning for this probe
    kind) or UNEXPECTED (it only falls back to the safe default).
    """
    if not outcome.failed:
        return None

    # a shape probe only fails as a whole when reading the global throws
    expected = kind in ("support", "static") and is_getter_rejection(outcome)
    return EXPECTED if expected else UNEXPECTED


# ----------------------------------------------------------------------
# Shape
# ----------------------------------------------------------------------

def call_allowed(outcome: ProbeOutcome | None) -> bool:
    """Any result but "must be called with new" means the call form is legal."""
    if outcome is None:
        return False
    return not is_needs_new(outcome)


def construct_allowed(outcome: ProbeOutcome | None) -> bool:
    if outcome is None:
        return False
    return not is_not_a_constructor(outcome)


def ast_node_types(outcome: ProbeOutcome) -> List[str]:
    if not outcome.ok:
        return []

    report = ShapeReport.model_validate(outcome.value or {})
    if report.member_only or not report.is_function:
        return [MEMBER_EXPRESSION]

    labels = []
    if call_allowed(report.call):
        labels.append(CALL_EXPRESSION)
    if construct_allowed(report.construct_outcome):
        labels.append(NEW_EXPRESSION)
    return labels
