"""Wrapper contract and composition.

A wrapper is a signature-preserving transform ``(procedure, options) ->
procedure``.  ``set_wrapper`` pairs a wrapper with its options as a sealed
``WrapperChoice``; ``with_wrappers`` folds a base procedure through a list of
choices so several wrappers apply without nested calls::

    fetch = with_wrappers(fetch_quote, [
        set_wrapper(with_retry, RetryOptions(operation="quote")),
        set_wrapper(with_timeout, TimeoutOptions(threshold={"seconds": 3})),
    ])

The last choice is the outermost layer: above, the timeout bounds both
retry attempts together.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, Sequence, Type, TypeVar, Union, overload

from .errors import CompositionError
from .procedure import P

OptionsT = TypeVar("OptionsT")

Wrapper = Callable[[P, OptionsT], P]

# Only set_wrapper holds this; WrapperChoice refuses construction without it
_SEAL = object()


@dataclass(frozen=True)
class WrapperChoice(Generic[P, OptionsT]):
    """A wrapper paired with options of the type it expects."""

    wrapper: Wrapper[P, OptionsT]
    options: OptionsT
    _seal: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._seal is not _SEAL:
            raise TypeError("WrapperChoice must be built with set_wrapper()")


@overload
def set_wrapper(wrapper: Wrapper[P, OptionsT], options: OptionsT) -> WrapperChoice[P, OptionsT]: ...
@overload
def set_wrapper(wrapper: Mapping[str, Any]) -> WrapperChoice[Any, Any]: ...


def set_wrapper(wrapper: Any, options: Any = None) -> WrapperChoice[Any, Any]:
    """Build a WrapperChoice from a wrapper and its options.

    Also accepts a single ``{"wrapper": ..., "options": ...}`` mapping.  The
    input is never mutated; a new immutable choice is returned.
    """
    if isinstance(wrapper, Mapping):
        return set_wrapper(wrapper["wrapper"], wrapper.get("options"))
    if not callable(wrapper):
        raise TypeError(f"wrapper must be callable, got {type(wrapper).__name__}")
    return WrapperChoice(wrapper=wrapper, options=options, _seal=_SEAL)


def with_wrappers(procedure: P, wrappers: Sequence[WrapperChoice[P, Any]]) -> P:
    """Wrap *procedure* with each choice in order; the last one ends up outermost."""
    composed = procedure
    for position, choice in enumerate(wrappers):
        if not isinstance(choice, WrapperChoice):
            raise CompositionError(
                f"wrappers[{position}] is a {type(choice).__name__}, not a WrapperChoice; "
                "build it with set_wrapper()"
            )
        composed = choice.wrapper(composed, choice.options)
    return composed


OptionsCls = TypeVar("OptionsCls")


def coerce_options(
    options: Union[OptionsCls, Mapping[str, Any], None],
    options_cls: Type[OptionsCls],
) -> OptionsCls:
    """Normalise wrapper options given as a dataclass, a mapping or None."""
    if options is None:
        return options_cls()
    if isinstance(options, options_cls):
        return options
    if isinstance(options, Mapping):
        return options_cls(**options)
    raise TypeError(
        f"expected {options_cls.__name__} or a mapping, got {type(options).__name__}"
    )
