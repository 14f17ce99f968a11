"""Step protocol shared by the synchronous and asynchronous contracts.

Resolution is written once, as a generator that yields I/O requests
(``HostResolve``, ``ReadManifest``) and receives their outcomes. Two drivers
run the same generator: ``run_sync`` performs each request with blocking calls,
``run_async`` awaits them. Both contracts therefore make identical decisions
for identical inputs.

Host resolution failures in the not-found family come back as ``Missing``
values, never as exceptions, so every fallback decision in the generator is an
explicit match. Any other host error propagates out of the driver untouched.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any
from typing import TypeVar

from ..errors import NotFoundError
from ..manifests import ManifestCache
from ..models import ResolutionContext
from ..models import ResolvedModule

logger = logging.getLogger(__name__)

T = TypeVar("T")

DefaultResolve = Callable[[str, ResolutionContext], ResolvedModule]
AsyncDefaultResolve = Callable[[str, ResolutionContext], "ResolvedModule | Awaitable[ResolvedModule]"]


@dataclass(frozen=True)
class HostResolve:
    """Ask the host's default resolver to resolve a literal specifier."""

    specifier: str
    context: ResolutionContext


@dataclass(frozen=True)
class ReadManifest:
    """Read (memoised) the JSON manifest at ``path``; replies None when absent."""

    path: str


@dataclass(frozen=True)
class Found:
    module: ResolvedModule


@dataclass(frozen=True)
class Missing:
    error: NotFoundError


Outcome = Found | Missing
Request = HostResolve | ReadManifest
Steps = Generator[Request, Any, T]


def run_sync(steps: Steps[T], default_resolve: DefaultResolve, manifests: ManifestCache) -> T:
    """Drive a step generator with blocking I/O."""
    reply: Any = None
    while True:
        try:
            request = steps.send(reply)
        except StopIteration as stop:
            return stop.value

        if isinstance(request, ReadManifest):
            reply = manifests.get(request.path)
            continue

        try:
            reply = Found(default_resolve(request.specifier, request.context))
        except NotFoundError as e:
            reply = Missing(e)


async def run_async(steps: Steps[T], default_resolve: AsyncDefaultResolve, manifests: ManifestCache) -> T:
    """Drive a step generator, awaiting host calls and manifest reads."""
    reply: Any = None
    while True:
        try:
            request = steps.send(reply)
        except StopIteration as stop:
            return stop.value

        if isinstance(request, ReadManifest):
            reply = await manifests.aget(request.path)
            continue

        try:
            result = default_resolve(request.specifier, request.context)
            if inspect.isawaitable(result):
                result = await result
            reply = Found(result)
        except NotFoundError as e:
            reply = Missing(e)


def run_manifest_only(steps: Steps[T], manifests: ManifestCache) -> T:
    """Drive a step generator that only reads manifests (format detection)."""
    reply: Any = None
    while True:
        try:
            request = steps.send(reply)
        except StopIteration as stop:
            return stop.value

        if not isinstance(request, ReadManifest):
            raise TypeError(f"Unexpected host request outside resolution: {request!r}")
        reply = manifests.get(request.path)
