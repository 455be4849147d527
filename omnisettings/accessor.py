"""
Typed Accessor

Derives typed values from frozen settings on request. Nothing is
precomputed and the settings are never modified.

All typed lookups go through ``resolve_setting``, which returns a
``SettingValue`` tagged with its ``SettingKind``; the ``get_*`` methods of
``TypedAccessor`` are thin wrappers that unwrap it.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional, Union

from omnisettings.core.exceptions import SettingParseError
from omnisettings.resolver import FrozenSettings

INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class SettingKind(str, Enum):
    """Shape of a typed setting."""
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    BOOLEAN = "boolean"
    STRING_LIST = "string_list"
    LONG_LIST = "long_list"


@dataclass(frozen=True)
class AccessRequest:
    """
    What a consumer asks for.

    Attributes:
        key: Setting key
        default: Returned when the key is absent
        separator: Separator for list-shaped lookups
        prefix: Key prefix for sub-map lookups
    """
    key: str = ""
    default: Optional[str] = None
    separator: str = ","
    prefix: str = ""

    def __post_init__(self):
        if not self.separator:
            raise ValueError("separator must not be empty")


@dataclass(frozen=True)
class SettingValue:
    """A typed setting: ``value`` holds the Python value for ``kind``."""
    kind: SettingKind
    key: str
    value: Union[None, str, int, bool, tuple[str, ...], tuple[int, ...]]


RequestLike = Union[AccessRequest, str]


def _as_request(request: RequestLike, **overrides) -> AccessRequest:
    """Normalize to an AccessRequest; keyword options given as non-None win."""
    given = {k: v for k, v in overrides.items() if v is not None}
    if isinstance(request, AccessRequest):
        return replace(request, **given) if given else request
    return AccessRequest(key=request, **given)


def _parse_integer(
    text: Optional[str],
    key: str,
    kind: SettingKind,
    low: int,
    high: int,
) -> int:
    if text is None:
        raise SettingParseError(
            f"Setting '{key}' is not set and has no default",
            key=key, value=None, kind=kind.value,
        )
    if not _INTEGER_RE.fullmatch(text):
        raise SettingParseError(
            f"Setting '{key}' is not a valid {kind.value}: {text!r}",
            key=key, value=text, kind=kind.value,
        )
    number = int(text)
    if not low <= number <= high:
        raise SettingParseError(
            f"Setting '{key}' is out of range for {kind.value}: {text!r}",
            key=key, value=text, kind=kind.value,
        )
    return number


def _split(text: Optional[str], separator: str) -> tuple[str, ...]:
    if not text:
        return ()
    parts = re.split(r"\s*" + re.escape(separator) + r"\s*", text)
    while parts and parts[-1] == "":
        parts.pop()
    return tuple(parts)


def lookup_string(settings: Mapping[str, str], request: AccessRequest) -> Optional[str]:
    """The raw value for ``request.key``, else ``request.default``."""
    value = settings.get(request.key)
    if value is None:
        value = request.default
    return value


def resolve_setting(
    settings: Mapping[str, str],
    request: AccessRequest,
    kind: SettingKind,
) -> SettingValue:
    """
    Derive a typed value for ``request``.

    Raises:
        SettingParseError: For INTEGER, LONG and LONG_LIST when the text is
            not a well-formed number of that width, or is absent
    """
    text = lookup_string(settings, request)
    key = request.key

    if kind is SettingKind.STRING:
        value = text
    elif kind is SettingKind.INTEGER:
        value = _parse_integer(text, key, kind, INT_MIN, INT_MAX)
    elif kind is SettingKind.LONG:
        value = _parse_integer(text, key, kind, LONG_MIN, LONG_MAX)
    elif kind is SettingKind.BOOLEAN:
        # Anything but "true" is False, never an error
        value = text is not None and text.lower() == "true"
    elif kind is SettingKind.STRING_LIST:
        value = _split(text, request.separator)
    elif kind is SettingKind.LONG_LIST:
        value = tuple(
            _parse_integer(part, key, kind, LONG_MIN, LONG_MAX)
            for part in _split(text, request.separator)
        )
    else:
        raise ValueError(f"Unknown setting kind: {kind}")

    return SettingValue(kind=kind, key=key, value=value)


class TypedAccessor:
    """
    Typed, read-only view over frozen settings.

    Every getter accepts either an AccessRequest or a plain key with
    keyword options.

    Example:
        ```python
        accessor = TypedAccessor(settings)
        port = accessor.get_integer_setting("db.port", default="5432")
        hosts = accessor.get_separated_string_setting(AccessRequest("hosts", separator=";"))
        db = accessor.get_settings(prefix="db.")
        ```
    """

    def __init__(self, settings: Mapping[str, str]):
        if not isinstance(settings, FrozenSettings):
            settings = FrozenSettings(settings)
        self._settings = settings

    @property
    def settings(self) -> FrozenSettings:
        return self._settings

    def resolve(self, request: RequestLike, kind: SettingKind) -> SettingValue:
        return resolve_setting(self._settings, _as_request(request), kind)

    def get_string_setting(self, request: RequestLike, default: Optional[str] = None) -> Optional[str]:
        return resolve_setting(self._settings, _as_request(request, default=default), SettingKind.STRING).value

    def get_integer_setting(self, request: RequestLike, default: Optional[str] = None) -> int:
        return resolve_setting(self._settings, _as_request(request, default=default), SettingKind.INTEGER).value

    def get_long_setting(self, request: RequestLike, default: Optional[str] = None) -> int:
        return resolve_setting(self._settings, _as_request(request, default=default), SettingKind.LONG).value

    def get_boolean_setting(self, request: RequestLike, default: Optional[str] = None) -> bool:
        return resolve_setting(self._settings, _as_request(request, default=default), SettingKind.BOOLEAN).value

    def get_separated_string_setting(
        self,
        request: RequestLike,
        default: Optional[str] = None,
        separator: Optional[str] = None,
    ) -> tuple[str, ...]:
        req = _as_request(request, default=default, separator=separator)
        return resolve_setting(self._settings, req, SettingKind.STRING_LIST).value

    def get_separated_long_setting(
        self,
        request: RequestLike,
        default: Optional[str] = None,
        separator: Optional[str] = None,
    ) -> tuple[int, ...]:
        req = _as_request(request, default=default, separator=separator)
        return resolve_setting(self._settings, req, SettingKind.LONG_LIST).value

    def get_settings(
        self,
        request: Optional[AccessRequest] = None,
        prefix: str = "",
    ) -> FrozenSettings:
        """
        Entries whose key starts with the prefix, keys kept verbatim.

        An empty prefix returns the settings themselves.
        """
        if request is not None and not prefix:
            prefix = request.prefix
        return self._settings.with_prefix(prefix)
