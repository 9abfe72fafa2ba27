"""Skip-policy classification of listed candidates."""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from awssweep.core.errors import NOT_FOUND_CODES, is_access_denied, is_not_found
from awssweep.sweep.report import SkipReason

# (reason, predicate over the describe payload)
SkipRule = Tuple[SkipReason, Callable[[Dict[str, Any]], bool]]


@dataclass(frozen=True)
class Candidate:
    identifier: str
    attributes: Dict[str, Any]


class Verdict(str, Enum):
    PROCEED = "proceed"
    SKIP = "skip"
    ERROR = "error"


@dataclass(frozen=True)
class Classification:
    identifier: str
    verdict: Verdict
    candidate: Optional[Candidate] = None
    reason: Optional[SkipReason] = None
    error: Optional[BaseException] = None
    message: str = ''

    @classmethod
    def proceed(cls, candidate: Candidate) -> "Classification":
        return cls(candidate.identifier, Verdict.PROCEED, candidate=candidate)

    @classmethod
    def skip(cls, identifier: str, reason: SkipReason, message: str = '') -> "Classification":
        return cls(identifier, Verdict.SKIP, reason=reason, message=message)

    @classmethod
    def failed(cls, identifier: str, error: BaseException) -> "Classification":
        return cls(identifier, Verdict.ERROR, error=error, message=str(error))


def classify(client, identifier: str, describe: Callable, skip_rules: Sequence[SkipRule] = (),
             resource_type: str = 'resource', not_found_codes: Optional[Iterable[str]] = None) -> Classification:
    """Describe one identifier and decide whether it may be deleted."""
    region = getattr(client, 'region', None)
    try:
        attributes = describe(client, identifier)
    except Exception as e:
        if is_not_found(e, not_found_codes or NOT_FOUND_CODES):
            return Classification.skip(identifier, SkipReason.NOT_FOUND, str(e))
        if is_access_denied(e):
            logging.debug(f"[{region}] Skipping {resource_type} ({identifier}): {e}",
                          extra={'region': region, 'resource_type': resource_type, 'resource_id': identifier})
            return Classification.skip(identifier, SkipReason.ACCESS_DENIED, str(e))
        return Classification.failed(identifier, e)

    for reason, predicate in skip_rules:
        try:
            matched = predicate(attributes)
        except Exception as e:
            return Classification.failed(identifier, e)
        if matched:
            logging.debug(f"[{region}] Skipping {resource_type} ({identifier}): {reason.value}",
                          extra={'region': region, 'resource_type': resource_type, 'resource_id': identifier})
            return Classification.skip(identifier, reason, reason.value)

    return Classification.proceed(Candidate(identifier, attributes))


def classify_all(client, identifiers: Iterable[str], describe: Callable, skip_rules: Sequence[SkipRule] = (),
                 resource_type: str = 'resource', max_workers: int = 10,
                 cancel_event: Optional[threading.Event] = None,
                 not_found_codes: Optional[Iterable[str]] = None) -> List[Classification]:
    """Classify identifiers concurrently as they are yielded.

    The identifier iterable is consumed in the calling thread, so a paginated
    listing stays sequential while describe calls fan out to the pool.
    Identifiers not yet started when ``cancel_event`` is set are dropped.
    """
    def work(identifier):
        if cancel_event is not None and cancel_event.is_set():
            return None
        return classify(client, identifier, describe, skip_rules, resource_type, not_found_codes)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = []
        for identifier in identifiers:
            if cancel_event is not None and cancel_event.is_set():
                break
            futures.append(executor.submit(work, identifier))
        results = [f.result() for f in futures]
    return [r for r in results if r is not None]
