"""Executes deletion of sweepable resources and aggregates the outcomes."""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

from awssweep.sweep.report import SweepOutcome, SweepReport
from awssweep.sweep.sweepable import Sweepable


class SweepOrchestrator:
    """Deletes every sweepable on a bounded worker pool.

    One failed deletion never stops the others. Outcomes are only ever
    SUCCEEDED or FAILED here; skips are decided before a resource reaches
    the orchestrator. Each sweepable is attempted at most once per run.
    """

    def __init__(self, max_workers: int = 10, cancel_event: Optional[threading.Event] = None):
        self.max_workers = max_workers
        self.cancel_event = cancel_event or threading.Event()

    def run(self, sweepables: Iterable[Sweepable], report: Optional[SweepReport] = None,
            resource_type: Optional[str] = None) -> SweepReport:
        sweepables = list(sweepables)
        if report is None:
            report = SweepReport(resource_type or (sweepables[0].resource_type if sweepables else 'resources'))
        sweepables = self._unique(sweepables, report)
        if not sweepables:
            return report

        region = report.region
        logging.info(f"[{region}] Sweeping {len(sweepables)} {report.resource_type} resource(s)",
                     extra={'region': region, 'resource_type': report.resource_type, 'action': 'sweep'})

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self._sweep_one, s, region): s for s in sweepables}
            for future in as_completed(futures):
                outcome = future.result()
                if outcome is not None:
                    report.record(outcome)

        if self.cancel_event.is_set():
            attempted = sum(1 for s in sweepables if s.identifier in report.outcomes)
            logging.warning(f"[{region}] Sweep of {report.resource_type} cancelled after "
                            f"{attempted}/{len(sweepables)} deletion(s)", extra={'region': region})
            report.mark_cancelled()
        return report

    @staticmethod
    def _unique(sweepables, report):
        """Keep the first handle per identifier; drop ones already recorded."""
        seen = set(report.outcomes)
        unique = []
        for s in sweepables:
            if s.identifier in seen:
                logging.warning(f"[{report.region}] Ignoring duplicate {s.resource_type} {s.identifier}",
                                extra={'region': report.region, 'resource_type': s.resource_type,
                                       'resource_id': s.identifier})
                continue
            seen.add(s.identifier)
            unique.append(s)
        return unique

    def _sweep_one(self, sweepable: Sweepable, region: Optional[str]) -> Optional[SweepOutcome]:
        if self.cancel_event.is_set():
            return None
        extra = {'region': region, 'resource_type': sweepable.resource_type,
                 'resource_id': sweepable.identifier, 'action': 'delete'}
        logging.info(f"[{region}] Deleting {sweepable.resource_type} {sweepable.identifier}", extra=extra)
        try:
            sweepable.delete()
        except Exception as e:
            logging.error(f"[{region}] Error deleting {sweepable.resource_type} {sweepable.identifier}: {e}",
                          extra=extra)
            return SweepOutcome.failed(sweepable.identifier, e)
        return SweepOutcome.succeeded(sweepable.identifier)

