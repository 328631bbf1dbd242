# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PersistentMap - An immutable mapping with structural sharing.

The map is a hash array mapped trie (HAMT). Each bitmap node holds up to 32
slots, selected by 5 bits of the key hash; a slot is either a ``(key, value)``
leaf tuple or a child node. When two keys share all 64 hash bits they end up
in a collision node below the deepest bitmap level.

Every "mutation" copies only the nodes on the path from the root to the
touched slot; all other nodes are shared with the previous version.

Example:
    >>> m1 = PersistentMap({'a': 1})
    >>> m2 = m1.set('b', 2)
    >>> dict(m1), dict(m2)
    ({'a': 1}, {'a': 1, 'b': 2})
"""

from __future__ import annotations

from collections.abc import ItemsView, Iterable, Mapping
from typing import Any, Iterator

_BITS = 5
_MASK = (1 << _BITS) - 1
_HASH_BITS = 64
_HASH_MASK = (1 << _HASH_BITS) - 1


def _hash(key: Any) -> int:
    return hash(key) & _HASH_MASK


def _slot(bitmap: int, bit: int) -> int:
    """Position of ``bit`` inside the compressed entries tuple."""
    return bin(bitmap & (bit - 1)).count('1')


class _BitmapNode:
    __slots__ = ('bitmap', 'entries')

    def __init__(self, bitmap: int, entries: tuple) -> None:
        self.bitmap = bitmap
        self.entries = entries


class _CollisionNode:
    __slots__ = ('pairs',)

    def __init__(self, pairs: tuple) -> None:
        self.pairs = pairs


_EMPTY = _BitmapNode(0, ())


def _lookup(node: Any, h: int, key: Any, shift: int) -> Any:
    while True:
        if isinstance(node, _CollisionNode):
            for k, v in node.pairs:
                if k == key:
                    return v
            raise KeyError(key)
        bit = 1 << ((h >> shift) & _MASK)
        if not node.bitmap & bit:
            raise KeyError(key)
        entry = node.entries[_slot(node.bitmap, bit)]
        if isinstance(entry, tuple):
            if entry[0] == key:
                return entry[1]
            raise KeyError(key)
        node = entry
        shift += _BITS


def _merge(k1: Any, v1: Any, h1: int, k2: Any, v2: Any, h2: int, shift: int) -> Any:
    """Build the smallest subtree holding two leaves that clash at ``shift``."""
    if shift >= _HASH_BITS:
        return _CollisionNode(((k1, v1), (k2, v2)))
    i1 = (h1 >> shift) & _MASK
    i2 = (h2 >> shift) & _MASK
    if i1 == i2:
        return _BitmapNode(1 << i1, (_merge(k1, v1, h1, k2, v2, h2, shift + _BITS),))
    if i1 < i2:
        entries = ((k1, v1), (k2, v2))
    else:
        entries = ((k2, v2), (k1, v1))
    return _BitmapNode((1 << i1) | (1 << i2), entries)


def _assoc(node: Any, h: int, key: Any, value: Any, shift: int) -> tuple[Any, bool]:
    """Return (new_node, added). ``new_node is node`` when nothing changed."""
    if isinstance(node, _CollisionNode):
        pairs = node.pairs
        for i, (k, v) in enumerate(pairs):
            if k == key:
                if v is value:
                    return node, False
                return _CollisionNode(pairs[:i] + ((key, value),) + pairs[i + 1:]), False
        return _CollisionNode(pairs + ((key, value),)), True

    bitmap, entries = node.bitmap, node.entries
    bit = 1 << ((h >> shift) & _MASK)
    idx = _slot(bitmap, bit)

    if not bitmap & bit:
        return _BitmapNode(bitmap | bit, entries[:idx] + ((key, value),) + entries[idx:]), True

    entry = entries[idx]
    if isinstance(entry, tuple):
        k, v = entry
        if k == key:
            if v is value:
                return node, False
            new_entry, added = (key, value), False
        else:
            new_entry = _merge(k, v, _hash(k), key, value, h, shift + _BITS)
            added = True
    else:
        new_entry, added = _assoc(entry, h, key, value, shift + _BITS)
        if new_entry is entry:
            return node, False

    return _BitmapNode(bitmap, entries[:idx] + (new_entry,) + entries[idx + 1:]), added


def _dissoc(node: Any, h: int, key: Any, shift: int) -> Any:
    """Remove ``key`` below ``node``.

    Returns ``node`` itself when the key is absent, ``None`` when the node
    becomes empty, or a leaf tuple when a sub-node shrinks to a single leaf.
    """
    if isinstance(node, _CollisionNode):
        pairs = tuple(pair for pair in node.pairs if pair[0] != key)
        if len(pairs) == len(node.pairs):
            return node
        if len(pairs) == 1:
            return pairs[0]
        return _CollisionNode(pairs)

    bitmap, entries = node.bitmap, node.entries
    bit = 1 << ((h >> shift) & _MASK)
    if not bitmap & bit:
        return node
    idx = _slot(bitmap, bit)
    entry = entries[idx]

    if isinstance(entry, tuple):
        if entry[0] != key:
            return node
        new_entry = None
    else:
        new_entry = _dissoc(entry, h, key, shift + _BITS)
        if new_entry is entry:
            return node

    if new_entry is None:
        if bitmap == bit:
            return None
        rest = entries[:idx] + entries[idx + 1:]
        if shift and len(rest) == 1 and isinstance(rest[0], tuple):
            return rest[0]
        return _BitmapNode(bitmap & ~bit, rest)

    if shift and len(entries) == 1 and isinstance(new_entry, tuple):
        return new_entry
    return _BitmapNode(bitmap, entries[:idx] + (new_entry,) + entries[idx + 1:])


def _iter_pairs(node: Any) -> Iterator[tuple[Any, Any]]:
    if isinstance(node, _CollisionNode):
        yield from node.pairs
        return
    for entry in node.entries:
        if isinstance(entry, tuple):
            yield entry
        else:
            yield from _iter_pairs(entry)


class _PairsView(ItemsView):
    __slots__ = ()

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return _iter_pairs(self._mapping._root)


class PersistentMap(Mapping):
    """An immutable mapping whose updates return new, structurally-shared maps.

    Reading works like a regular ``dict``; writing goes through ``set``,
    ``discard`` and ``delete``, each returning a new PersistentMap and leaving
    the original untouched.

    Example:
        >>> base = PersistentMap()
        >>> m = base.set('x', 1).set('y', 2)
        >>> m['y']
        2
        >>> len(base)
        0
    """

    __slots__ = ('_root', '_count')

    def __init__(
        self,
        source: Mapping | Iterable[tuple[Any, Any]] | None = None,
    ) -> None:
        """Initialize a PersistentMap.

        Args:
            source: Optional initial content, either a mapping or an iterable
                of ``(key, value)`` pairs.
        """
        self._root: Any = _EMPTY
        self._count = 0
        if source is None:
            return
        pairs = source.items() if isinstance(source, Mapping) else source
        root, count = _EMPTY, 0
        for key, value in pairs:
            root, added = _assoc(root, _hash(key), key, value, 0)
            count += added
        self._root = root
        self._count = count

    @classmethod
    def _make(cls, root: Any, count: int) -> PersistentMap:
        pmap = cls.__new__(cls)
        pmap._root = root
        pmap._count = count
        return pmap

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        items = ', '.join(f'{k!r}: {v!r}' for k, v in self.items())
        return f"PersistentMap({{{items}}})"

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        for key, _ in _iter_pairs(self._root):
            yield key

    def __getitem__(self, key: Any) -> Any:
        return _lookup(self._root, _hash(key), key, 0)

    def __contains__(self, key: object) -> bool:
        try:
            _lookup(self._root, _hash(key), key, 0)
        except KeyError:
            return False
        return True

    def items(self) -> _PairsView:
        """Return a view of (key, value) pairs, read straight from the trie."""
        return _PairsView(self)

    # ==================== Updates ====================

    def set(self, key: Any, value: Any) -> PersistentMap:
        """Return a map where ``key`` maps to ``value``.

        Returns ``self`` if ``key`` already maps to this very object.
        """
        root, added = _assoc(self._root, _hash(key), key, value, 0)
        if root is self._root:
            return self
        return self._make(root, self._count + added)

    def discard(self, key: Any) -> PersistentMap:
        """Return a map without ``key``, or ``self`` if ``key`` is absent."""
        root = _dissoc(self._root, _hash(key), key, 0)
        if root is self._root:
            return self
        if root is None:
            root = _EMPTY
        return self._make(root, self._count - 1)

    def delete(self, key: Any) -> PersistentMap:
        """Return a map without ``key``.

        Raises:
            KeyError: If ``key`` is not in the map.
        """
        result = self.discard(key)
        if result is self:
            raise KeyError(key)
        return result
