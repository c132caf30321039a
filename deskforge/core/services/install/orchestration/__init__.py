"""L5 Orchestration — batch install/remove in dependency order."""

from deskforge.core.services.install.orchestration.orchestrator import (  # noqa: F401
    install_in_order,
    plan_order,
    remove_in_order,
)
