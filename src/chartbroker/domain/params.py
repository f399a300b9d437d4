"""Parameter bags for provisioning and binding payloads.

Payloads are untyped nested maps (string, number, bool, list or map values).
Lookups walk dotted paths and never cast silently: a missing path and a value
of the wrong type are reported as different errors.
"""

import copy
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Optional, Union

from chartbroker.domain.base.exceptions import ParameterNotFoundError, ParameterNotStringError

ParamValue = Union[str, int, float, bool, None, list["ParamValue"], dict[str, "ParamValue"]]

_MISSING = object()


class ParameterBag(Mapping[str, Any]):
    """Read-only view over a nested parameter map."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: dict[str, Any] = copy.deepcopy(dict(values or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterBag):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)

    def dig(self, path: str) -> tuple[Any, bool]:
        """Walk a dotted path. Returns ``(value, found)``."""
        current: Any = self._values
        for segment in path.split("."):
            if not isinstance(current, Mapping):
                return None, False
            current = current.get(segment, _MISSING)
            if current is _MISSING:
                return None, False
        return current, True

    def dig_string(self, path: str) -> str:
        value, found = self.dig(path)
        if not found:
            raise ParameterNotFoundError(f"parameter {path!r} not found", path=path)
        if not isinstance(value, str):
            raise ParameterNotStringError(f"parameter {path!r} is not a string", path=path)
        return value

    def dig_string_or(self, path: str, default: str) -> str:
        """Like dig_string, but a missing path yields ``default``."""
        try:
            return self.dig_string(path)
        except ParameterNotFoundError:
            return default

    def first_string(self, aliases: Iterable[str], default: str = "") -> str:
        """Return the first alias that resolves; older chart revisions renamed keys."""
        for alias in aliases:
            value, found = self.dig(alias)
            if not found:
                continue
            if not isinstance(value, str):
                raise ParameterNotStringError(f"parameter {alias!r} is not a string", path=alias)
            return value
        return default

    def merged(self, other: Optional[Mapping[str, Any]]) -> "ParameterBag":
        """Return a new bag with ``other`` winning on top-level key collisions."""
        values = self.to_dict()
        values.update(copy.deepcopy(dict(other or {})))
        return ParameterBag(values)


class ProvisionParams(ParameterBag):
    """Parameters supplied when an instance was provisioned."""


class BindParams(ParameterBag):
    """Parameters supplied with a bind request."""
