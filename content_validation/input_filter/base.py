"""Input filter capability — the interface every pluggable validator must satisfy.

The request gate never inspects a validator beyond this interface. The
registry treats any service that is not an ``InputFilterInterface`` as absent.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional


class InputFilterInterface(ABC):
    """Abstract base for input filters.

    Contract:
        - set_validation_group() narrows validation to the named inputs;
          ``None`` or an empty iterable restores "validate everything"
        - set_data() replaces the data to validate
        - is_valid() is deterministic for the same data and group
        - get_messages() returns per-field message lists for invalid inputs only
    """

    @abstractmethod
    def set_validation_group(self, names: Optional[Iterable[str]]) -> None:
        """Restrict validation to ``names``.

        Raises:
            UnknownInputError: if a name is not an input of this filter
        """
        ...

    @abstractmethod
    def set_data(self, data: Mapping[str, Any]) -> None:
        ...

    @abstractmethod
    def is_valid(self) -> bool:
        ...

    @abstractmethod
    def get_messages(self) -> dict[str, list[str]]:
        ...

    @abstractmethod
    def get_values(self) -> dict[str, Any]:
        """Filtered values for the inputs in the active validation group."""
        ...
