"""
L1 Domain — Error analysis (pure).

Classifies backend error text into a handful of user-facing categories
and renders a display string with actionable suggestions.
No I/O, no subprocess.

Classification is case-insensitive substring matching against the
error text, tried in a fixed order; the first category with a matching
pattern wins.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

FAILURE_GLYPH = "✗"


@dataclass(frozen=True)
class ErrorInfo:
    """User-facing view of an error."""

    category: str = ""
    message: str = ""
    suggestions: list[str] = field(default_factory=list)
    show_details: bool = False


@dataclass(frozen=True)
class _Matcher:
    category: str
    patterns: tuple[str, ...]
    build: Callable[[str], tuple[str, list[str]]]


def _permission(_pkg: str) -> tuple[str, list[str]]:
    return "Permission denied", [
        "Try running with sudo",
        "Check that your user has admin privileges",
    ]


def _network(_pkg: str) -> tuple[str, list[str]]:
    return "Network connection failed", [
        "Check your internet connection",
        "Try again in a few moments",
    ]


def _not_found(pkg: str) -> tuple[str, list[str]]:
    if pkg:
        return f"Package '{pkg}' not found", [
            "Check the package name spelling",
            "Update package lists: sudo apt update",
        ]
    return "Package not found", [
        "Verify the package name",
        "Update your package lists",
    ]


def _already_installed(_pkg: str) -> tuple[str, list[str]]:
    return "Already installed", ["Package is already on your system"]


def _not_installed(_pkg: str) -> tuple[str, list[str]]:
    return "Not installed", [
        "Package is not on your system",
        "Use 'deskforge packages list' to see installed packages",
    ]


def _dependencies(_pkg: str) -> tuple[str, list[str]]:
    return "Missing dependencies", [
        "Install required dependencies first",
        "Try: sudo apt --fix-broken install",
    ]


# Order matters: first match wins.
_MATCHERS: tuple[_Matcher, ...] = (
    _Matcher("permission", ("permission", "denied", "sudo", "root"), _permission),
    _Matcher("network", ("network", "connection", "timeout", "no such host"), _network),
    _Matcher("not_found", ("not found", "no such", "unable to locate"), _not_found),
    _Matcher("already_installed", ("already installed", "is installed"), _already_installed),
    _Matcher("not_installed", ("not installed", "is not installed"), _not_installed),
    _Matcher("dependency", ("dependency", "depends", "requires"), _dependencies),
)

_GENERIC = ("Operation failed", ["Run with --verbose for more details"])


def _match(text: str) -> _Matcher | None:
    lowered = text.lower()
    for matcher in _MATCHERS:
        if any(p in lowered for p in matcher.patterns):
            return matcher
    return None


def classify_error(text: str) -> str:
    """Category name for an error text, or ``"generic"``."""
    matcher = _match(text)
    return matcher.category if matcher else "generic"


def get_error_info(
    err: BaseException | str | None,
    package_name: str = "",
    verbose: bool = False,
) -> ErrorInfo:
    """Analyse an error and return user-friendly information.

    Args:
        err: The error (exception or raw text). ``None`` yields an
            empty ``ErrorInfo``.
        package_name: Package the operation concerned, if any.
        verbose: Whether technical details should be shown.
    """
    if err is None:
        return ErrorInfo()

    matcher = _match(str(err))
    if matcher is not None:
        message, suggestions = matcher.build(package_name)
        return ErrorInfo(
            category=matcher.category,
            message=message,
            suggestions=suggestions,
            show_details=verbose,
        )

    message, suggestions = _GENERIC
    return ErrorInfo(
        category="generic",
        message=message,
        suggestions=list(suggestions),
        show_details=verbose,
    )


def format_error_message(
    err: BaseException | str | None,
    package_name: str = "",
    verbose: bool = False,
    operation: str = "install",
) -> str:
    """Render an error for display.

    Non-verbose output is a single line with the first suggestion in
    parentheses. Verbose output appends the raw error text under
    ``Technical details:`` and every suggestion under ``Suggestions:``.

    Returns:
        The display string, or ``""`` when ``err`` is ``None``.
    """
    if err is None:
        return ""

    info = get_error_info(err, package_name, verbose)

    if package_name:
        parts = [f"{FAILURE_GLYPH} Failed to {operation} {package_name}"]
        if info.message:
            parts.append(f": {info.message}")
    else:
        parts = [f"{FAILURE_GLYPH} {info.message}"]

    if info.show_details:
        parts.append(f"\n  Technical details: {err}")

    if info.suggestions and not verbose:
        parts.append(f" ({info.suggestions[0]})")
    elif info.suggestions:
        parts.append("\n  Suggestions:")
        parts.extend(f"\n    • {s}" for s in info.suggestions)

    return "".join(parts)
