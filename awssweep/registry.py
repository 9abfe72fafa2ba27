"""Registry mapping resource-type names to sweep entry points."""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Union

from awssweep.sweep.report import SweepReport

SweepFunc = Callable[..., SweepReport]


@dataclass(frozen=True)
class Sweeper:
    name: str
    func: SweepFunc

    def __call__(self, region: str, options=None) -> SweepReport:
        return self.func(region, options)


class SweeperRegistry:
    """Built once at startup and handed to the CLI; sweeps only read it."""

    def __init__(self):
        self._sweepers: Dict[str, Sweeper] = {}

    def add(self, name: str, func: SweepFunc) -> Sweeper:
        if name in self._sweepers:
            raise ValueError(f"sweeper {name!r} already registered")
        sweeper = Sweeper(name, func)
        self._sweepers[name] = sweeper
        return sweeper

    def get(self, name: str) -> Sweeper:
        try:
            return self._sweepers[name]
        except KeyError:
            raise KeyError(f"no sweeper registered for {name!r}") from None

    def names(self) -> List[str]:
        return sorted(self._sweepers)

    def select(self, filters: Optional[Union[str, Iterable[str]]] = None) -> List[Sweeper]:
        """Return the sweepers named by ``filters``, or all of them.

        ``filters`` may be a comma-separated string or an iterable of names;
        "all" or an empty value selects every sweeper. Unknown names raise
        KeyError.
        """
        if isinstance(filters, str):
            filters = filters.split(',')
        names = [f.strip() for f in (filters or []) if f and f.strip()]
        if not names or 'all' in names:
            return [self._sweepers[n] for n in self.names()]
        return [self.get(n) for n in dict.fromkeys(names)]

    def __contains__(self, name: str) -> bool:
        return name in self._sweepers

    def __len__(self) -> int:
        return len(self._sweepers)
