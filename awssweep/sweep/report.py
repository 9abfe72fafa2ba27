"""Per-resource sweep outcomes and the aggregated report of one run."""
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from awssweep.core.errors import SweepError, combine_messages


class SkipReason(str, Enum):
    MANAGED_EXTERNALLY = "managed externally"
    PENDING_DELETION = "pending deletion"
    ACCESS_DENIED = "access denied"
    NOT_FOUND = "not found"
    DRY_RUN = "dry run"


class SweepStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SweepOutcome:
    identifier: str
    status: SweepStatus
    reason: Optional[SkipReason] = None
    error: Optional[BaseException] = None
    message: str = ''

    @classmethod
    def succeeded(cls, identifier: str) -> "SweepOutcome":
        return cls(identifier, SweepStatus.SUCCEEDED)

    @classmethod
    def skipped(cls, identifier: str, reason: SkipReason, message: str = '') -> "SweepOutcome":
        return cls(identifier, SweepStatus.SKIPPED, reason=reason, message=message)

    @classmethod
    def failed(cls, identifier: str, error: BaseException) -> "SweepOutcome":
        return cls(identifier, SweepStatus.FAILED, error=error, message=str(error))


@dataclass(frozen=True)
class SweepFailure:
    """A failure record: what failed, where, and why."""
    resource_type: str
    identifier: Optional[str]
    phase: str
    error: BaseException
    region: Optional[str] = None

    def __str__(self) -> str:
        where = f" ({self.region})" if self.region else ''
        if self.identifier is None:
            return f"{self.phase} {self.resource_type}{where}: {self.error}"
        return f"{self.phase} {self.resource_type} ({self.identifier}){where}: {self.error}"


@dataclass
class SweepReport:
    resource_type: str
    region: Optional[str] = None
    outcomes: Dict[str, SweepOutcome] = field(default_factory=dict)
    log: List[SweepOutcome] = field(default_factory=list)
    failures: List[SweepFailure] = field(default_factory=list)
    region_skipped: Optional[str] = None
    cancelled: bool = False

    def __post_init__(self):
        self._lock = threading.Lock()

    def record(self, outcome: SweepOutcome) -> None:
        """Record the terminal outcome of one resource.

        Outcomes are final; recording a second one for the same identifier
        raises ValueError.
        """
        if outcome.status is SweepStatus.PENDING:
            raise ValueError(f"cannot record a pending outcome for {outcome.identifier}")
        with self._lock:
            if outcome.identifier in self.outcomes:
                raise ValueError(f"outcome already recorded for {outcome.identifier}")
            self.outcomes[outcome.identifier] = outcome
            self.log.append(outcome)
            if outcome.status is SweepStatus.FAILED:
                self.failures.append(SweepFailure(
                    self.resource_type, outcome.identifier, 'deleting', outcome.error, self.region,
                ))

    def add_failure(self, identifier: Optional[str], phase: str, error: BaseException) -> None:
        with self._lock:
            self.failures.append(SweepFailure(self.resource_type, identifier, phase, error, self.region))

    def mark_cancelled(self) -> None:
        with self._lock:
            self.cancelled = True

    def status_of(self, identifier: str) -> SweepStatus:
        outcome = self.outcomes.get(identifier)
        return outcome.status if outcome else SweepStatus.PENDING

    def with_status(self, status: SweepStatus) -> List[SweepOutcome]:
        return [o for o in self.log if o.status is status]

    @property
    def succeeded(self) -> List[SweepOutcome]:
        return self.with_status(SweepStatus.SUCCEEDED)

    @property
    def skipped(self) -> List[SweepOutcome]:
        return self.with_status(SweepStatus.SKIPPED)

    @property
    def failed(self) -> List[SweepOutcome]:
        return self.with_status(SweepStatus.FAILED)

    @property
    def ok(self) -> bool:
        """True when nothing failed and the run was not cancelled.

        Skipped outcomes never make a run fail.
        """
        return not self.failures and not self.cancelled

    def error_message(self) -> Optional[str]:
        messages = [str(f) for f in self.failures]
        if self.cancelled:
            messages.append(f"sweeping {self.resource_type} cancelled")
        if not messages:
            return None
        return combine_messages(messages)

    def raise_for_failures(self) -> None:
        if self.failures:
            raise SweepError(self.failures)

    def summary(self) -> str:
        return (
            f"succeeded={len(self.succeeded)} skipped={len(self.skipped)} "
            f"failed={len(self.failed)} errors={len(self.failures)}"
        )
