# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PersistentTreeStore - An immutable tree of files and folders.

This module provides the PersistentTreeStore class, the core container of the
genro-filetree library. The store maps each parent component to the ordered
tuple of its children and each observed component to its observers. Both
mappings are PersistentMap instances, so every operation that changes the tree
returns a new store sharing all untouched structure with the old one.

Key Features:
    - **Value semantics**: a store never changes once built; keep any version
    - **Ordered children**: children stay in the order they were added
    - **Identity by id**: components are matched by id, never by content
    - **Observers**: per-component callbacks on replace and remove

Example:
    Basic usage::

        root = Folder('root')
        docs = Folder('docs')
        readme = File('README.md')

        v1 = PersistentTreeStore().add_all(root, [docs, readme])
        v2 = v1.rename(docs, 'documentation')

        v1.children(root)  # (Folder('docs', ...), File('README.md', ...))
        v2.children(root)  # (Folder('documentation', ...), File('README.md', ...))

    With observers::

        store = store.attach(readme, CallbackObserver(on_change))
        store = store.remove(readme)  # on_change(readme, None)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Iterator

from ..component import Component, with_name
from ..exceptions import NotFoundError
from .pmap import PersistentMap
from .subscription import ComponentObserver, SubscriptionMixin

logger = logging.getLogger(__name__)


def _as_pmap(source: Mapping | None) -> PersistentMap:
    if source is None:
        return PersistentMap()
    if isinstance(source, PersistentMap):
        return source
    return PersistentMap((key, tuple(items)) for key, items in source.items())


def _purge(children_map: PersistentMap, component: Component) -> PersistentMap:
    """Drop the children entry of ``component`` and every occurrence of it."""
    remaining = children_map.discard(component.id)
    result = remaining
    for parent_id, siblings in remaining.items():
        if component in siblings:
            result = result.set(
                parent_id, tuple(c for c in siblings if c != component)
            )
    return result


class PersistentTreeStore(SubscriptionMixin):
    """An immutable tree of components with per-component observers.

    PersistentTreeStore provides:
    - children(component): Ordered children of a component
    - add / add_all: Append children to a parent
    - remove / delete: Drop a component and its whole subtree
    - replace / rename: Swap a component in place, keeping its subtree
    - attach / detach: Manage observers of a component

    Every operation returning a PersistentTreeStore leaves ``self``
    unchanged. Missing parents are treated as having no children.

    Example:
        >>> root, doc = Folder('root'), File('doc.txt')
        >>> empty = PersistentTreeStore()
        >>> store = empty.add(root, doc)
        >>> store.children(root) == (doc,), empty.children(root)
        (True, ())
    """

    __slots__ = ('_children', '_observers')

    def __init__(
        self,
        children_map: Mapping | None = None,
        observers_map: Mapping | None = None,
    ) -> None:
        """Initialize a PersistentTreeStore.

        Args:
            children_map: Optional mapping of parent id to its children.
                A PersistentMap is used as is, so that new versions share it.
            observers_map: Optional mapping of component id to its observers.
        """
        self._children = _as_pmap(children_map)
        self._observers = _as_pmap(observers_map)

    def _evolve(
        self,
        children_map: PersistentMap | None = None,
        observers_map: PersistentMap | None = None,
    ) -> PersistentTreeStore:
        return PersistentTreeStore(
            self._children if children_map is None else children_map,
            self._observers if observers_map is None else observers_map,
        )

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return (
            f"PersistentTreeStore(parents={len(self._children)}, "
            f"observed={len(self._observers)})"
        )

    @property
    def children_map(self) -> PersistentMap:
        """The underlying parent id -> children mapping."""
        return self._children

    @property
    def observers_map(self) -> PersistentMap:
        """The underlying component id -> observers mapping."""
        return self._observers

    # ==================== Queries ====================

    def children(self, component: Component) -> tuple[Component, ...]:
        """Return the children of ``component`` in insertion order.

        Returns an empty tuple if the component has no children entry.
        """
        return self._children.get(component.id, ())

    def observers(self, component: Component) -> tuple[ComponentObserver, ...]:
        """Return the observers of ``component`` in registration order."""
        return self._observers.get(component.id, ())

    def walk(self, component: Component) -> Iterator[tuple[Component, Component]]:
        """Walk the subtree below ``component`` depth-first.

        Yields:
            Tuples of (parent, child), each parent before its descendants.

        Example:
            >>> for parent, child in store.walk(root):
            ...     print(parent.name, '->', child.name)
        """
        stack = [(component, iter(self.children(component)))]
        while stack:
            parent, pending = stack[-1]
            child = next(pending, None)
            if child is None:
                stack.pop()
                continue
            yield parent, child
            stack.append((child, iter(self.children(child))))

    # ==================== Tree Changes ====================

    def add(self, parent: Component, child: Component) -> PersistentTreeStore:
        """Append ``child`` to the children of ``parent``.

        Duplicates are allowed: adding the same child twice lists it twice.
        """
        siblings = self.children(parent) + (child,)
        return self._evolve(children_map=self._children.set(parent.id, siblings))

    def add_all(
        self, parent: Component, children: Iterable[Component]
    ) -> PersistentTreeStore:
        """Append each of ``children`` to ``parent``, in the given order."""
        store = self
        for child in children:
            store = store.add(parent, child)
        return store

    def remove(self, component: Component) -> PersistentTreeStore:
        """Remove ``component`` and all its descendants.

        For each removed component, its observers are notified with
        ``(component, None)`` before anything is removed; then its
        descendants are removed, its children entry is dropped and it is
        purged from every children list it appears in.

        A component reachable more than once in the subtree is removed and
        notified only once.

        Args:
            component: The component to remove.

        Returns:
            A new store without the component and its subtree.
        """
        logger.debug("Removing %r with its subtree", component)
        seen = {component.id}
        self._notify_change(component, None)

        children_map = self._children
        stack = [(component, iter(self.children(component)))]
        while stack:
            node, pending = stack[-1]
            for child in pending:
                if child.id not in seen:
                    seen.add(child.id)
                    self._notify_change(child, None)
                    stack.append((child, iter(children_map.get(child.id, ()))))
                    break
            else:
                # all descendants of node are gone
                stack.pop()
                children_map = _purge(children_map, node)
        return self._evolve(children_map=children_map)

    def delete(self, component: Component) -> PersistentTreeStore:
        """Alias for remove()."""
        return self.remove(component)

    def replace(self, old: Component, new: Component) -> PersistentTreeStore:
        """Put ``new`` wherever ``old`` is, keeping the subtree of ``old``.

        Observers of ``old`` are notified with ``(old, new)`` first. The
        children of ``old`` become the children of ``new`` as they are (no
        recursion), and every occurrence of ``old`` in any children list is
        substituted in place. Observers stay registered under ``old``'s id.

        Children already stored under ``new``'s id are discarded: they are
        overwritten by the children of ``old``, or dropped when ``old`` has
        none.

        Args:
            old: The component to replace.
            new: The component taking its place.

        Returns:
            A new store with ``new`` in place of ``old``.
        """
        logger.debug("Replacing %r with %r", old, new)
        self._notify_change(old, new)

        subtree = self._children.get(old.id)
        relocated = self._children.discard(old.id)
        if subtree is None:
            relocated = relocated.discard(new.id)
        else:
            relocated = relocated.set(new.id, subtree)

        result = relocated
        for parent_id, siblings in relocated.items():
            if old in siblings:
                result = result.set(
                    parent_id, tuple(new if c == old else c for c in siblings)
                )
        return self._evolve(children_map=result)

    def rename(self, component: Component, new_name: str) -> PersistentTreeStore:
        """Replace ``component`` with a copy named ``new_name``.

        Raises:
            InvalidArgumentError: If the component variant cannot be renamed.
        """
        logger.debug("Renaming %r to %r", component, new_name)
        return self.replace(component, with_name(component, new_name))

    # ==================== Observers ====================

    def attach(
        self, component: Component, observer: ComponentObserver
    ) -> PersistentTreeStore:
        """Register ``observer`` for changes of ``component``.

        Observers are called in registration order; attaching the same
        observer twice makes it called twice.
        """
        registered = self.observers(component) + (observer,)
        return self._evolve(observers_map=self._observers.set(component.id, registered))

    def detach(
        self, component: Component, observer: ComponentObserver
    ) -> PersistentTreeStore:
        """Unregister the first occurrence of ``observer`` for ``component``.

        If the component has observers but ``observer`` is not among them,
        the store is returned unchanged. An emptied registration is kept, so
        a later detach on the same component does not raise.

        Raises:
            NotFoundError: If no observer was ever attached to the component.
        """
        registered = self._observers.get(component.id)
        if registered is None:
            logger.debug("No observers registered for %r", component)
            raise NotFoundError(f"No observers registered for {component!r}")
        if observer not in registered:
            return self
        idx = registered.index(observer)
        remaining = registered[:idx] + registered[idx + 1:]
        return self._evolve(observers_map=self._observers.set(component.id, remaining))
