"""Convenience constructors for protocol messages."""

from __future__ import annotations

from typing import Optional

from .fields import CLONE, CODE, EVAL, SESSION
from .message import Request


def clone(session: Optional[str] = None) -> Request:
    """Request a new session, optionally copying an existing *session*."""
    return Request(CLONE, **{SESSION: session})


def evaluate(code: str, session: str) -> Request:
    return Request(EVAL, **{CODE: code, SESSION: session})


def in_ns(ns: str) -> str:
    """Code that switches the session's current namespace to *ns*."""
    return "(in-ns '%s)" % (_symbol(ns))


def ns_vars(ns: str) -> str:
    """Code that maps each public var in *ns* to its metadata and value."""
    return (
        "(into {} (for [[sym v] (ns-publics '%s)] "
        "[sym {:meta (meta v) :value (deref v)}]))" % (_symbol(ns))
    )


def _symbol(ns: str) -> str:
    ns = str(ns).strip()
    if ns == "" or any(c.isspace() or c in "()[]{}\"';`~@^\\" for c in ns):
        raise ValueError(f"not a valid namespace name: {ns!r}")
    return ns
