# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FileTree component classes.

Components are immutable values. Two components are the same component when
they carry the same ``id``, whatever their variant or name: this is what lets
a renamed copy stand in for the original inside a PersistentTreeStore.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Any
from uuid import UUID, uuid4

from .exceptions import InvalidArgumentError


@dataclass(frozen=True, eq=False)
class Component:
    """A named node of a file tree.

    Each component has:
    - name: Its label, changed only by building a renamed copy
    - id: Unique identifier, generated on creation and kept by copies

    Example:
        >>> doc = File('notes.txt')
        >>> renamed = with_name(doc, 'todo.txt')
        >>> renamed == doc, renamed.name
        (True, 'todo.txt')
    """

    name: str
    id: UUID = field(default_factory=uuid4)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Component):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, id={str(self.id)[:8]})"


@dataclass(frozen=True, eq=False, repr=False)
class File(Component):
    """A leaf component carrying text content."""

    content: str = ''


@dataclass(frozen=True, eq=False, repr=False)
class Folder(Component):
    """A component meant to hold children in a store."""


@singledispatch
def with_name(component: Any, name: str) -> Component:
    """Return a copy of ``component`` with the same id and a new name.

    Every component variant registers its own implementation::

        @with_name.register(Link)
        def _(component, name):
            return dataclasses.replace(component, name=name)

    Raises:
        InvalidArgumentError: If no implementation exists for the variant.
    """
    raise InvalidArgumentError(
        f"Cannot rename component of type {type(component).__name__}"
    )


@with_name.register(File)
@with_name.register(Folder)
def _copy_with_name(component: Component, name: str) -> Component:
    return dataclasses.replace(component, name=name)
