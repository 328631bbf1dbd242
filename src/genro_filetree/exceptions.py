# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FileTree exceptions."""

from __future__ import annotations


class FileTreeError(Exception):
    """Base exception for FileTree errors."""

    pass


class InvalidArgumentError(FileTreeError, ValueError):
    """Raised when a component variant has no registered renamer."""

    pass


class NotFoundError(FileTreeError, LookupError):
    """Raised when a component has no observer registration to detach from."""

    pass
