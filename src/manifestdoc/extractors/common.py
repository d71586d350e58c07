"""Helpers for matching Ruby DSL call shapes."""

from __future__ import annotations

from typing import Any

from ..parsers.ruby import Call, Statement, to_text


def receiver(stmt: Statement) -> str | None:
    """The constant a call chain starts from, without a leading `::`."""
    calls = stmt.chain.calls
    if calls and calls[0].receiver_only:
        return calls[0].name.lstrip(":")
    return None


def command(stmt: Statement) -> Call | None:
    """The call a block-level statement starts with, e.g. `desc` or `newparam`."""
    calls = stmt.chain.calls
    if calls and not calls[0].receiver_only:
        return calls[0]
    return None


def arg_text(call: Call, index: int = 0) -> str | None:
    if index < len(call.args):
        return to_text(call.args[index])
    return None


def kwarg_text(call: Call, key: str) -> str | None:
    return to_text(call.kwargs.get(key))


def names(value: Any) -> tuple[str, ...]:
    """Normalize a symbol, string or list of them into a tuple of names."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(to_text(v) for v in value if v is not None)
    return (to_text(value),)


def description(body: list[Statement]) -> str:
    """Text of the first `desc` call in a block."""
    for stmt in body:
        call = command(stmt)
        if call is not None and call.name == "desc":
            return arg_text(call) or ""
    return ""
