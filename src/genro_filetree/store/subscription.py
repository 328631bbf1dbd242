# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Observer contract and change notification for PersistentTreeStore."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..component import Component
    from .pmap import PersistentMap

SubscriberCallback = Callable[['Component', Optional['Component']], None]


@runtime_checkable
class ComponentObserver(Protocol):
    """Anything that wants to hear about a component being replaced or removed.

    ``notify`` receives the component as it was and its replacement, or
    ``None`` when the component has been removed.
    """

    def notify(self, old: Component, new: Component | None) -> None: ...


@dataclass(frozen=True)
class CallbackObserver:
    """Adapt a plain callable to the ComponentObserver protocol.

    Two CallbackObservers wrapping the same callable are equal, so a fresh
    wrapper can be used to detach a previously attached one.

    Example:
        >>> store = store.attach(doc, CallbackObserver(print))
        >>> store = store.detach(doc, CallbackObserver(print))
    """

    callback: SubscriberCallback

    def notify(self, old: Component, new: Component | None) -> None:
        self.callback(old, new)


class SubscriptionMixin:
    """Synchronous dispatch of change events to per-component observers."""

    __slots__ = ()

    _observers: PersistentMap

    def _notify_change(self, before: Component, after: Component | None) -> None:
        """Call every observer registered for ``before``, in registration order.

        Args:
            before: The component being replaced or removed.
            after: The replacement, or None on removal.
        """
        for observer in self._observers.get(before.id, ()):
            observer.notify(before, after)
