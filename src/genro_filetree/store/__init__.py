# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Store package - Persistent tree container.

This package provides the PersistentTreeStore class, an immutable tree of
components where every change returns a new version of the store.

The package is organized into:
- core: Main PersistentTreeStore class with tree and observer operations
- pmap: PersistentMap, the structurally-shared mapping behind the store
- subscription: Observer protocol and change notification

Example:
    >>> from genro_filetree import PersistentTreeStore, Folder, File
    >>> root = Folder('root')
    >>> store = PersistentTreeStore().add(root, File('a.txt'))
    >>> [c.name for c in store.children(root)]
    ['a.txt']
"""

from .core import PersistentTreeStore
from .pmap import PersistentMap
from .subscription import CallbackObserver, ComponentObserver, SubscriberCallback

__all__ = [
    "PersistentTreeStore",
    "PersistentMap",
    "ComponentObserver",
    "CallbackObserver",
    "SubscriberCallback",
]
