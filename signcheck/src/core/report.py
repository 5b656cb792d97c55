from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from signcheck.src.core.models import Environment, InvalidInput

BUNDLE_IDENTITY = "bundleIdentity"
ENVIRONMENT_CONSISTENCY = "environmentConsistency"
CERTIFICATE_CONSISTENCY = "certificateConsistency"
DEVICE_ENROLLMENT = "deviceEnrollment"

# Report order
CHECK_IDS: Tuple[str, ...] = (
    BUNDLE_IDENTITY,
    ENVIRONMENT_CONSISTENCY,
    CERTIFICATE_CONSISTENCY,
    DEVICE_ENROLLMENT,
)


class CheckStatus(Enum):
    PASS = "pass"
    FAIL = "fail"
    NOT_APPLICABLE = "not_applicable"


def _plain(value: Any) -> Any:
    """Convert compared values into JSON-friendly ones"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check plus the raw values it compared."""

    status: CheckStatus
    explanation: Optional[str] = None
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASS

    @property
    def failed(self) -> bool:
        return self.status is CheckStatus.FAIL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "explanation": self.explanation,
            "values": {key: _plain(value) for key, value in self.values.items()},
        }


class DiagnosticReport(Mapping[str, CheckResult]):
    """Results keyed by check identifier.

    A missing key means the check was never run (e.g. no certificate was
    supplied). A present key with ``CheckStatus.NOT_APPLICABLE`` means the
    check ran but its precondition didn't hold.
    """

    def __init__(self, results: Mapping[str, CheckResult]):
        unknown = set(results) - set(CHECK_IDS)
        if unknown:
            raise InvalidInput(f"Unknown check identifiers: {sorted(unknown)}")
        for check_id, result in results.items():
            if not isinstance(result, CheckResult):
                raise InvalidInput(f"{check_id} is not a CheckResult: {result!r}")

        ordered = {key: results[key] for key in CHECK_IDS if key in results}
        self._results = MappingProxyType(ordered)

    def __getitem__(self, check_id: str) -> CheckResult:
        return self._results[check_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __repr__(self) -> str:
        statuses = ", ".join(
            f"{key}={result.status.value}" for key, result in self._results.items()
        )
        return f"DiagnosticReport({statuses})"

    @property
    def passed(self) -> bool:
        """True when nothing failed. Not-applicable checks don't count against it."""
        return not any(result.failed for result in self._results.values())

    def failures(self) -> List[str]:
        return [key for key, result in self._results.items() if result.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "checks": {key: result.to_dict() for key, result in self._results.items()},
        }


def environment_label(environment: Environment) -> str:
    return "no push" if environment is Environment.ABSENT else environment.value
