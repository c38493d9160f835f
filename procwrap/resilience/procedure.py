"""Procedure shapes.

A procedure is an async callable taking up to two positional arguments,
``(input, context)``.  Three shapes are valid:

- nullary ``async def f()``
- unary ``async def f(input)``
- binary ``async def f(input, context)``

Wrappers are written once against the binary shape.  ``adapt_procedure``
converts the caller's procedure to that shape, lets the wrapper build its
layer, then hands back a callable with the caller's original shape so the
wrapping stays signature preserving.
"""
from __future__ import annotations

import functools
import inspect
from enum import IntEnum
from typing import Any, Awaitable, Callable, TypeVar

P = TypeVar("P", bound=Callable[..., Awaitable[Any]])

BinaryProcedure = Callable[[Any, Any], Awaitable[Any]]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Placeholder for an argument the caller did not pass
MISSING: Any = _Missing()


class Arity(IntEnum):
    NULLARY = 0
    UNARY = 1
    BINARY = 2


_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def arity_of(procedure: Callable[..., Any]) -> Arity:
    """Classify *procedure* by its positional parameters.

    ``*args`` and callables without introspectable signatures count as binary.
    Raises TypeError for procedures that require more than two arguments.
    """
    try:
        signature = inspect.signature(procedure)
    except (TypeError, ValueError):
        return Arity.BINARY

    accepted = 0
    required = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return Arity.BINARY
        if param.kind in _POSITIONAL:
            accepted += 1
            if param.default is inspect.Parameter.empty:
                required += 1
        elif param.kind is inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            raise TypeError(f"procedure {procedure!r} requires keyword-only argument {param.name!r}")

    if required > 2:
        raise TypeError(
            f"procedure {procedure!r} requires {required} positional arguments; "
            "procedures take at most (input, context)"
        )
    return Arity(min(accepted, 2))


def as_binary(procedure: Callable[..., Awaitable[Any]], arity: Arity) -> BinaryProcedure:
    """Return a binary view of *procedure* that drops arguments it does not take."""
    if arity is Arity.NULLARY:
        def call(input: Any, context: Any) -> Awaitable[Any]:
            return procedure()
    elif arity is Arity.UNARY:
        def call(input: Any, context: Any) -> Awaitable[Any]:
            if input is MISSING:
                return procedure()
            return procedure(input)
    else:
        def call(input: Any, context: Any) -> Awaitable[Any]:
            args = [arg for arg in (input, context) if arg is not MISSING]
            return procedure(*args)
    return call


def restore_shape(wrapped: BinaryProcedure, arity: Arity, original: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
    """Expose *wrapped* with the call shape of *original*."""
    if arity is Arity.NULLARY:
        async def shaped() -> Any:
            return await wrapped(MISSING, MISSING)
    elif arity is Arity.UNARY:
        async def shaped(input: Any = MISSING) -> Any:
            return await wrapped(input, MISSING)
    else:
        async def shaped(input: Any = MISSING, context: Any = MISSING) -> Any:
            return await wrapped(input, context)
    return functools.update_wrapper(shaped, original)


def adapt_procedure(procedure: P, build: Callable[[BinaryProcedure], BinaryProcedure]) -> P:
    """Apply a binary wrapper *build* to a procedure of any valid shape."""
    arity = arity_of(procedure)
    wrapped = build(as_binary(procedure, arity))
    return restore_shape(wrapped, arity, procedure)
