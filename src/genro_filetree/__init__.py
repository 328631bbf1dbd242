# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-FileTree - Persistent trees of files and folders.

A lightweight, zero-dependency library providing an immutable,
structurally-shared tree of components with change observers
for the Genro ecosystem (Genro Kyō).
"""

__version__ = "0.1.0"

import logging

from .component import Component, File, Folder, with_name
from .exceptions import (
    FileTreeError,
    InvalidArgumentError,
    NotFoundError,
)
from .store import (
    CallbackObserver,
    ComponentObserver,
    PersistentMap,
    PersistentTreeStore,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "PersistentTreeStore",
    "PersistentMap",
    # Components
    "Component",
    "File",
    "Folder",
    "with_name",
    # Observers
    "ComponentObserver",
    "CallbackObserver",
    # Exceptions
    "FileTreeError",
    "InvalidArgumentError",
    "NotFoundError",
]
