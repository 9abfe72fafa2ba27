"""Sweep pipeline: list, filter, adapt, then hand off to the orchestrator."""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from awssweep.core.config import Config
from awssweep.core.errors import NOT_FOUND_CODES, error_message, is_access_denied, is_skip_sweep_error
from awssweep.core.logging import timed
from awssweep.sweep.clients import ClientCache, shared_client_cache
from awssweep.sweep.enumerator import PageEnumerator
from awssweep.sweep.filter import SkipRule, Verdict, classify_all
from awssweep.sweep.orchestrator import SweepOrchestrator
from awssweep.sweep.report import SkipReason, SweepOutcome, SweepReport
from awssweep.sweep.sweepable import DefaultsFunc, DeleteFunc, adapt


@dataclass
class ResourceDefinition:
    """Everything the pipeline needs to know about one resource type."""
    name: str
    display_name: str
    service: str
    list_operation: str
    result_key: str
    id_key: str
    page_size: int
    describe: Callable[[Any, str], Dict[str, Any]]
    delete: DeleteFunc
    skip_rules: Sequence[SkipRule] = ()
    fill_defaults: Optional[DefaultsFunc] = None
    list_params: Dict[str, Any] = field(default_factory=dict)
    not_found_codes: Iterable[str] = NOT_FOUND_CODES


@dataclass
class SweepOptions:
    """Per-invocation settings shared by every sweeper."""
    config: Config = field(default_factory=Config)
    cancel_event: threading.Event = field(default_factory=threading.Event)
    client_cache: Optional[ClientCache] = None

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def max_workers(self) -> int:
        return self.config.max_workers

    def clients(self) -> ClientCache:
        return self.client_cache or shared_client_cache(self.config)


@timed
def sweep_resources(region: str, definition: ResourceDefinition, options: Optional[SweepOptions] = None) -> SweepReport:
    """Sweep every leftover resource of one type in one region.

    Client creation errors propagate. Everything else is collected into the
    returned report.
    """
    options = options or SweepOptions()
    client = options.clients().get(region)
    service_client = client.client(definition.service)
    report = SweepReport(definition.name, region)
    extra = {'region': region, 'resource_type': definition.name}

    enumerator = PageEnumerator(
        service_client, definition.list_operation, definition.result_key, definition.id_key,
        definition.page_size, definition.list_params, options.cancel_event, region,
    )
    classifications = classify_all(
        client, _unique(enumerator), definition.describe, definition.skip_rules, definition.display_name,
        options.max_workers, options.cancel_event, definition.not_found_codes,
    )

    proceed = []
    for c in classifications:
        if c.verdict is Verdict.PROCEED:
            proceed.append(c.candidate)
        elif c.verdict is Verdict.SKIP:
            if c.reason is SkipReason.ACCESS_DENIED:
                logging.info(f"[{region}] Skipping {definition.display_name} ({c.identifier}): {c.message}",
                             extra=dict(extra, resource_id=c.identifier, action='skip'))
            report.record(SweepOutcome.skipped(c.identifier, c.reason, c.message))
        else:
            logging.error(f"[{region}] Error reading {definition.display_name} ({c.identifier}): {c.error}",
                          extra=dict(extra, resource_id=c.identifier, action='read'))
            report.add_failure(c.identifier, 'reading', c.error)

    if enumerator.error is not None:
        _record_listing_error(report, definition, enumerator.error)

    logging.info(f"[{region}] {definition.display_name}: {enumerator.count} listed, "
                 f"{len(proceed)} to sweep", extra=extra)

    if options.cancel_event.is_set():
        report.mark_cancelled()
        return report

    if options.dry_run:
        for candidate in proceed:
            logging.info(f"[Dry-Run] Would delete {definition.display_name} {candidate.identifier}",
                         extra=dict(extra, resource_id=candidate.identifier, action='delete'))
            report.record(SweepOutcome.skipped(candidate.identifier, SkipReason.DRY_RUN))
        return report

    sweepables = [adapt(c, client, definition.name, definition.delete, definition.fill_defaults) for c in proceed]
    SweepOrchestrator(options.max_workers, options.cancel_event).run(sweepables, report)
    return report


def _record_listing_error(report: SweepReport, definition: ResourceDefinition, error: Exception) -> None:
    region = report.region
    if is_skip_sweep_error(error):
        logging.warning(f"[{region}] Skipping {definition.display_name} sweep for {region}: {error}",
                        extra={'region': region, 'resource_type': definition.name})
        report.region_skipped = error_message(error)
        return
    if is_access_denied(error):
        logging.error(f"[{region}] Not authorized to list {definition.display_name}: {error}",
                      extra={'region': region, 'resource_type': definition.name})
    report.add_failure(None, 'listing', error)


def _unique(identifiers: Iterable[str]):
    seen = set()
    for identifier in identifiers:
        if identifier not in seen:
            seen.add(identifier)
            yield identifier
