"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from deskforge.core.services.install.domain.dag import (  # noqa: F401
    DependencyGraph,
    DependencyGraphBuilder,
)
from deskforge.core.services.install.domain.error_analysis import (  # noqa: F401
    ErrorInfo,
    classify_error,
    format_error_message,
    get_error_info,
)
from deskforge.core.services.install.domain.method_priority import (  # noqa: F401
    UNIVERSAL_METHODS,
    UNKNOWN_PRIORITY,
    best_method,
    get_method_priority,
    is_method_compatible,
    rank_methods,
)
