"""
Render options handed to the engine.

Values are forwarded verbatim: nothing is validated here, invalid
combinations surface as engine failures.
"""

from typing import Any, Iterator, Mapping, Optional, Union


class Options:
    """
    Mutable mapping of option name to value.

    Usage:
        options = Options({'paper_size': 'a4'})
        options.set('orientation', 'landscape').set({'base_url': '/srv'})
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values = dict(values or {})

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, attribute: Union[str, Mapping[str, Any]], value: Any = None) -> "Options":
        """
        Set one option, or several when ``attribute`` is a mapping.

        Returns:
            self, for chaining
        """
        if isinstance(attribute, Mapping):
            self._values.update(attribute)
        else:
            self._values[attribute] = value
        return self

    def to_dict(self) -> dict:
        return dict(self._values)

    def copy(self) -> "Options":
        return Options(self._values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Options):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Options({self._values!r})"
