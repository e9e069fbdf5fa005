"""Read-only JSON containers.

Matching runs one metadata document through many validators that may coerce
values and fill defaults. The document is frozen first so that no validator
can change what the next one sees. Frozen containers still pass the
``dict``/``list`` type checks the validators rely on.
"""

import copy
from typing import Any, NoReturn


def _read_only(*args: Any, **kwargs: Any) -> NoReturn:
    raise TypeError("frozen metadata cannot be modified")


class FrozenDict(dict):
    """A ``dict`` that rejects every mutation."""

    __setitem__ = _read_only
    __delitem__ = _read_only
    __ior__ = _read_only
    clear = _read_only
    pop = _read_only
    popitem = _read_only
    setdefault = _read_only
    update = _read_only

    def __copy__(self) -> dict:
        return dict(self)

    def __deepcopy__(self, memo: dict) -> dict:
        return {key: copy.deepcopy(value, memo) for key, value in self.items()}

    def __reduce__(self) -> Any:
        return (dict, (dict(self),))


class FrozenList(list):
    """A ``list`` that rejects every mutation."""

    __setitem__ = _read_only
    __delitem__ = _read_only
    __iadd__ = _read_only
    __imul__ = _read_only
    append = _read_only
    clear = _read_only
    extend = _read_only
    insert = _read_only
    pop = _read_only
    remove = _read_only
    reverse = _read_only
    sort = _read_only

    def __copy__(self) -> list:
        return list(self)

    def __deepcopy__(self, memo: dict) -> list:
        return [copy.deepcopy(value, memo) for value in self]

    def __reduce__(self) -> Any:
        return (list, (list(self),))


def freeze(value: Any) -> Any:
    """Return a deep, read-only copy of a JSON value.

    Scalars are returned unchanged; they are immutable already.
    """
    if isinstance(value, dict):
        return FrozenDict((key, freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return FrozenList(freeze(item) for item in value)
    return value


def is_frozen(value: Any) -> bool:
    """Return True if ``value`` is a frozen container."""
    return isinstance(value, (FrozenDict, FrozenList))
