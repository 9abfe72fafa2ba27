"""Uniform deletable handles built from filtered candidates."""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from awssweep.sweep.filter import Candidate

DeleteFunc = Callable[[Any, str, Dict[str, Any]], Any]
DefaultsFunc = Callable[[Candidate, Dict[str, Any]], None]


class Sweepable(ABC):
    resource_type: str
    identifier: str

    @abstractmethod
    def delete(self) -> None:
        pass


class SweepResource(Sweepable):
    """Binds one resource's identifier and synthesized fields to a delete call."""

    def __init__(self, resource_type: str, identifier: str, data: Dict[str, Any], client, delete_func: DeleteFunc):
        self.resource_type = resource_type
        self.identifier = identifier
        self.data = data
        self.client = client
        self._delete = delete_func

    def delete(self) -> None:
        self._delete(self.client, self.identifier, self.data)

    def __repr__(self):
        return f"SweepResource({self.resource_type!r}, {self.identifier!r})"


def adapt(candidate: Candidate, client, resource_type: str, delete_func: DeleteFunc,
          fill_defaults: Optional[DefaultsFunc] = None) -> SweepResource:
    """Wrap a candidate that passed filtering in a SweepResource.

    ``fill_defaults`` receives the candidate and the data dict (pre-populated
    with ``id``) and sets any fields the delete call needs beyond the
    identifier.
    """
    data: Dict[str, Any] = {'id': candidate.identifier}
    if fill_defaults is not None:
        fill_defaults(candidate, data)
    return SweepResource(resource_type, candidate.identifier, data, client, delete_func)
