"""
Install services — package façade, dependency graph, error analysis.

Public re-exports for convenient access:

    from deskforge.core.services.install import PackageService, DependencyGraphBuilder
"""

from deskforge.core.services.install.domain import (  # noqa: F401
    DependencyGraph,
    DependencyGraphBuilder,
    format_error_message,
    get_method_priority,
    is_method_compatible,
)
from deskforge.core.services.install.service import PackageService  # noqa: F401
