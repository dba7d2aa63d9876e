"""Forbidden-field extraction from executor authorization failures."""

from __future__ import annotations

import re
from collections.abc import Mapping

from authz_simulator.exceptions import FieldAccessDenied

__all__ = ["extract_forbidden_fields", "forbidden_fields_from_error", "reason_of"]

# access fields "a", "b" in collection "posts"
_MULTI_FIELD = re.compile(
    r'access fields?\s+((?:"[^"]+"\s*,\s*)*"[^"]+")\s+in collection',
    re.IGNORECASE,
)
# access field "a"
_SINGLE_FIELD = re.compile(r'access field\s+"([^"]+)"', re.IGNORECASE)
_QUOTED = re.compile(r'"([^"]+)"')


def extract_forbidden_fields(message: object) -> tuple[str, ...]:
    """Return the field names an authorization message says are forbidden.

    The quoted list form (``access fields "a", "b" in collection``) wins;
    only if it is absent are ``access field "x"`` phrases collected.
    Results keep first-seen order without duplicates.

    Example::

        extract_forbidden_fields(
            'You don\\'t have permission to access fields "secret_note", '
            '"date_created" in collection "posts"'
        )
        # ("secret_note", "date_created")
    """
    if not isinstance(message, str):
        return ()

    multi = _MULTI_FIELD.search(message)
    if multi is not None:
        found = _QUOTED.findall(multi.group(1))
    else:
        found = _SINGLE_FIELD.findall(message)
    return tuple(dict.fromkeys(found))


def reason_of(exc: BaseException) -> str:
    """Best human-readable reason for an executor failure.

    Looks at ``exc.reason``, then ``exc.extensions["reason"]``, then
    falls back to ``str(exc)``.
    """
    reason = getattr(exc, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    extensions = getattr(exc, "extensions", None)
    if isinstance(extensions, Mapping):
        ext_reason = extensions.get("reason")
        if isinstance(ext_reason, str) and ext_reason:
            return ext_reason
    return str(exc)


def forbidden_fields_from_error(exc: BaseException) -> tuple[str, ...]:
    """Return the denied fields an executor failure names.

    Structured :class:`FieldAccessDenied` errors are read directly;
    anything else is parsed from its reason text.
    """
    if isinstance(exc, FieldAccessDenied) and exc.fields:
        return exc.fields
    return extract_forbidden_fields(reason_of(exc))
