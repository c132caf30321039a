"""
L5 Orchestration — caller-driven batches over the package service.

Resolves an installation order with the dependency graph, then issues
one service call per package in that order. There are no transactional
semantics: earlier successes are never rolled back when a later package
fails.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from deskforge.core.context import OperationContext
from deskforge.core.errors import (
    AlreadyInstalledError,
    CancelledError,
    NotInstalledError,
    PackageError,
)
from deskforge.core.models.package import InstallationResult, Package
from deskforge.core.models.results import BatchResult
from deskforge.core.services.install.domain.dag import DependencyGraph
from deskforge.core.services.install.service import PackageService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


def plan_order(graph: DependencyGraph, targets: Iterable[str]) -> list[str]:
    """Merge the resolved orders of several targets.

    Each name keeps the position of its first appearance, so the
    result is still dependencies-first.

    Raises:
        CircularDependencyError: if the graph has a cycle.
    """
    order: list[str] = []
    seen: set[str] = set()
    for target in targets:
        for name in graph.resolve_dependencies(target):
            if name not in seen:
                seen.add(name)
                order.append(name)
    return order


def _run_batch(
    operation: str,
    call: Callable[[OperationContext, Package], InstallationResult],
    benign: type[PackageError],
    graph: DependencyGraph,
    order: list[str],
    ctx: OperationContext,
    stop_on_error: bool,
    on_progress: ProgressCallback | None,
) -> BatchResult:
    result = BatchResult(operation=operation, order=list(order))
    start = time.monotonic()

    for name in order:
        ctx.check()

        package = graph.get(name)
        if package is None:
            logger.info("Skipping %s: not declared", name)
            result.skipped.append(name)
            continue

        if on_progress:
            on_progress(operation, name)

        try:
            outcome = call(ctx, package)
        except CancelledError:
            raise
        except benign as e:
            logger.info("Skipping %s: %s", name, e)
            result.skipped.append(name)
            continue
        except PackageError as e:
            logger.warning("%s %s failed: %s", operation.capitalize(), name, e)
            result.failed.append(name)
            result.errors[name] = e.to_dict()
            if stop_on_error:
                break
            continue

        if outcome.success:
            result.succeeded.append(name)
        else:
            result.failed.append(name)
            result.errors[name] = {
                "kind": None,
                "message": outcome.error or f"{operation} failed",
                "package": name,
            }
            if stop_on_error:
                break

    result.duration_ms = int((time.monotonic() - start) * 1000)
    return result


def install_in_order(
    service: PackageService,
    graph: DependencyGraph,
    targets: Iterable[str],
    ctx: OperationContext,
    stop_on_error: bool = False,
    on_progress: ProgressCallback | None = None,
) -> BatchResult:
    """Install ``targets`` and their dependencies, dependencies first.

    Already-installed packages are reported as skipped. A cancelled
    context stops the batch and the cancellation error propagates.
    """
    order = plan_order(graph, targets)
    logger.info("Install order: %s", ", ".join(order))
    return _run_batch(
        "install", service.install, AlreadyInstalledError,
        graph, order, ctx, stop_on_error, on_progress,
    )


def remove_in_order(
    service: PackageService,
    graph: DependencyGraph,
    targets: Iterable[str],
    ctx: OperationContext,
    stop_on_error: bool = False,
    on_progress: ProgressCallback | None = None,
) -> BatchResult:
    """Remove exactly ``targets``, dependents before their dependencies.

    Dependencies are never removed implicitly since other declared
    packages may still need them. Packages that are not installed are
    reported as skipped.
    """
    targets = list(targets)
    wanted = set(targets)
    order = [name for name in reversed(plan_order(graph, targets)) if name in wanted]
    logger.info("Remove order: %s", ", ".join(order))
    return _run_batch(
        "remove", service.remove, NotInstalledError,
        graph, order, ctx, stop_on_error, on_progress,
    )
