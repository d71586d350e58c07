"""Extractor for functions declared with Puppet::Functions.create_function."""

from __future__ import annotations

import logging

from ..models import Function4x, Modifier, Overload, Parameter
from ..nodes import DeclarationNode
from ..parsers.ruby import Statement, Symbol
from ..tags import parse_docstring
from .common import arg_text, command, receiver

log = logging.getLogger(__name__)

_PARAM_CALLS = {
    "param": Modifier.REQUIRED,
    "required_param": Modifier.REQUIRED,
    "optional_param": Modifier.OPTIONAL,
    "repeated_param": Modifier.REPEATED,
    "optional_repeated_param": Modifier.REPEATED,
    "required_repeated_param": Modifier.REPEATED,
}
_BLOCK_CALLS = {"block_param", "optional_block_param"}


def _dispatch_parameter(stmt: Statement) -> Parameter | None:
    call = command(stmt)
    if call is None:
        return None
    if call.name in _PARAM_CALLS:
        return Parameter(
            name=arg_text(call, 1) or "",
            declared_type=arg_text(call, 0),
            modifier=_PARAM_CALLS[call.name],
        )
    if call.name in _BLOCK_CALLS:
        # block_param, block_param :name, block_param 'Callable[1, 1]', :name
        if len(call.args) >= 2:
            type_, name = arg_text(call, 0), arg_text(call, 1)
        elif len(call.args) == 1 and isinstance(call.args[0], Symbol):
            type_, name = None, arg_text(call, 0)
        else:
            type_, name = arg_text(call, 0), None
        return Parameter(name=name or "block", declared_type=type_, modifier=Modifier.BLOCK)
    return None


def _overload(stmt: Statement) -> Overload:
    call = command(stmt)
    doc = parse_docstring(stmt.comment)
    params: list[Parameter] = []
    return_type = None
    for inner in stmt.body():
        param = _dispatch_parameter(inner)
        if param is not None:
            params.append(param)
            continue
        inner_call = command(inner)
        if inner_call is not None and inner_call.name == "return_type":
            return_type = arg_text(inner_call)
    return Overload(
        name=arg_text(call) or "",
        overview=doc.overview,
        tags=tuple(doc.tags),
        parameters=tuple(params),
        return_type=return_type or "Any",
    )


def _method_overload(stmt: Statement, comment: str) -> Overload:
    """An overload implied by a plain `def` when a function has no dispatch blocks."""
    name, raw = stmt.signature()
    params: list[Parameter] = []
    for p in raw:
        if p.splat:
            params.append(Parameter(p.name, "Any", modifier=Modifier.REPEATED))
        elif p.block:
            params.append(Parameter(p.name, modifier=Modifier.BLOCK))
        elif p.default is not None:
            params.append(Parameter(p.name, "Any", p.default, Modifier.OPTIONAL))
        else:
            params.append(Parameter(p.name, "Any"))
    doc = parse_docstring(comment)
    return Overload(name=name, overview=doc.overview, tags=tuple(doc.tags), parameters=tuple(params))


def extract_function_4x(node: DeclarationNode) -> Function4x | None:
    """Extract `Puppet::Functions.create_function(:name) do ... end`.

    Every dispatch block is an overload documented by the comment directly
    above it. The comment above create_function itself is not used unless
    the function has no dispatch blocks, in which case the method named
    after the function is the single overload and takes that comment.
    """
    stmt = node.statement
    if stmt is None or receiver(stmt) != "Puppet::Functions":
        return None
    call = stmt.chain.find("create_function")
    if call is None or stmt.chain.block is None:
        return None

    name = arg_text(call)
    if not name:
        log.warning(f"{node.file}:{node.line}: create_function without a name")
        return None

    body = stmt.body()
    overloads = [
        _overload(s) for s in body if command(s) is not None and command(s).name == "dispatch"
    ]
    if not overloads:
        short = name.split("::")[-1]
        for s in body:
            signature = s.signature()
            if signature is not None and signature[0] == short:
                overloads.append(_method_overload(s, node.comment))
                break

    return Function4x(
        name=name,
        file=node.file,
        line=node.line,
        overloads=tuple(overloads),
    )
