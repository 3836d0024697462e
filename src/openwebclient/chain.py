"""Ordered, composable hook chains.

A HookChain collects transforms for one kind of value (requests or
responses) and folds them into a single function that is applied once per
extension-point invocation.

Formal Model:
    chain [h₁, h₂, …, hₙ] aggregates to
        x ↦ hₙ(validate(…h₂(validate(h₁(validate(x))))…))

    aggregate([]) = identity
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from openwebclient.errors import NullValueError, RegistrationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Type aliases
Transform = Callable[[T], T]

_handle_ids = itertools.count(1)


def identity(value: T) -> T:
    """Transform used by an empty chain."""
    return value


class HookHandle(Generic[T]):
    """Registration token returned by HookChain.attach.

    Two handles are never equal, even when they wrap the same transform,
    so attaching a transform twice yields two independent registrations.

    Attributes:
        id: Monotonic registration number (for logging)
        transform: The attached transform
        chain: Name of the owning chain
    """

    __slots__ = ("id", "transform", "chain", "_attached")

    def __init__(self, transform: Transform[T], chain: str) -> None:
        self.id = next(_handle_ids)
        self.transform = transform
        self.chain = chain
        self._attached = True

    @property
    def attached(self) -> bool:
        """Whether this registration is still part of its chain."""
        return self._attached

    def __repr__(self) -> str:
        name = getattr(self.transform, "__name__", type(self.transform).__name__)
        state = "attached" if self._attached else "detached"
        return f"<HookHandle #{self.id} {self.chain}:{name} {state}>"


class HookChain(Generic[T]):
    """Ordered list of transforms for a single value kind.

    Attach order is invocation order. Mutation and snapshotting are
    serialised by a lock; the aggregated function runs on a snapshot,
    outside the lock, so a hook may detach itself while it is running.

    Attributes:
        name: Value kind handled by this chain, used in NullValueError
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._handles: list[HookHandle[T]] = []
        self._lock = threading.Lock()

    def validate(self, value: T | None) -> T:
        """Return value unchanged, or raise NullValueError if it is None."""
        if value is None:
            raise NullValueError(self.name)
        return value

    def attach(self, transform: Transform[T]) -> HookHandle[T]:
        """Append a transform to the chain.

        Args:
            transform: Function taking and returning a value of this chain's kind

        Returns:
            Handle identifying this registration

        Raises:
            RegistrationError: If transform is None or not callable
        """
        if transform is None:
            raise RegistrationError("transform")
        if not callable(transform):
            raise RegistrationError("transform", f"transform must be callable, got {type(transform).__name__}")

        handle = HookHandle(transform, self.name)
        with self._lock:
            self._handles.append(handle)
        logger.debug("Attached %r", handle)
        return handle

    def detach(self, target: HookHandle[T] | Transform[T] | None) -> bool:
        """Remove a registration from the chain.

        A handle removes exactly that registration. A bare transform removes
        the most recently attached registration of it.

        Args:
            target: Handle returned by attach, or the transform itself

        Returns:
            True if a registration was removed, False if nothing matched
        """
        if target is None:
            return False

        with self._lock:
            if isinstance(target, HookHandle):
                index = next((i for i, h in enumerate(self._handles) if h is target), None)
            else:
                index = next(
                    (i for i in range(len(self._handles) - 1, -1, -1) if self._handles[i].transform == target),
                    None,
                )
            if index is None:
                return False
            handle = self._handles.pop(index)
            handle._attached = False

        logger.debug("Detached %r", handle)
        return True

    def clear(self) -> None:
        """Detach every registration."""
        with self._lock:
            for handle in self._handles:
                handle._attached = False
            self._handles.clear()

    def snapshot(self) -> list[Transform[T]]:
        """Current transforms in attach order."""
        with self._lock:
            return [h.transform for h in self._handles]

    def aggregate(self) -> Transform[T]:
        """Compose the current transforms into a single function.

        The composition is fixed at call time; later attach/detach calls do
        not affect an already aggregated function.

        Returns:
            Function applying every transform in attach order, validating the
            value before each one
        """
        transforms = self.snapshot()
        if not transforms:
            return identity

        validate = self.validate

        def composed(value: T) -> T:
            for transform in transforms:
                value = transform(validate(value))
            return value

        return composed

    def __call__(self, value: T) -> T:
        return self.aggregate()(value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __iter__(self) -> Iterator[Transform[T]]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"<HookChain {self.name} hooks={len(self)}>"
