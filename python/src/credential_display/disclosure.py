# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Enumeration of the attribute paths a credential discloses."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence, Union

Container = Union[Mapping[str, Any], Sequence[Any]]


def get_disclosed_attribute_paths(
    payload: Container,
    max_depth: int | None = None,
    *,
    skip_falsy: bool = True,
    prefix: tuple[str, ...] = (),
) -> list[list[str]]:
    """List the key paths of the disclosed attributes in *payload*.

    Nested mappings and lists are descended into while the depth budget
    lasts; each level consumes one unit. List elements are addressed by
    their index as a string (``"0"``, ``"1"``, ...). When the budget reaches
    zero the nested structure is reported as a single path ending at its own
    key.

    Parameters
    ----------
    payload:
        The attribute tree (must be a finite tree).
    max_depth:
        How many nesting levels below the top may be descended into.
        ``None`` means unbounded; ``0`` reports only top-level keys.
    skip_falsy:
        When True, keys whose value is falsy (``None``, ``""``, ``0``,
        ``False`` or an empty container) are not reported at all.
    prefix:
        Path of *payload* itself within the enclosing tree.

    Returns
    -------
    list[list[str]]
        Paths in payload iteration order, each at least one segment long.

    Examples
    --------
    >>> get_disclosed_attribute_paths({"a": 1, "b": {"c": 2, "d": None}}, 2)
    [['a'], ['b', 'c']]
    >>> get_disclosed_attribute_paths({"nationalities": ["DE", "FR"]}, 2)
    [['nationalities', '0'], ['nationalities', '1']]
    """
    paths: list[list[str]] = []

    for key, value in _children(payload):
        if skip_falsy and not value:
            continue

        path = [*prefix, key]
        # An empty container kept by skip_falsy=False is reported as a leaf.
        if _is_container(value) and value and max_depth != 0:
            paths.extend(
                get_disclosed_attribute_paths(
                    value,
                    max_depth - 1 if max_depth is not None else None,
                    skip_falsy=skip_falsy,
                    prefix=tuple(path),
                )
            )
        else:
            paths.append(path)

    return paths


def _is_container(value: object) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _children(payload: Container) -> Iterator[tuple[str, Any]]:
    if isinstance(payload, Mapping):
        for key, value in payload.items():
            yield str(key), value
    else:
        for index, value in enumerate(payload):
            yield str(index), value
