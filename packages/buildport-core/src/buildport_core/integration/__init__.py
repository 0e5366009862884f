"""Framework integration for buildport.

- inject_integrations: Register platform plugins in a site's framework files
- select_integrations: Decide which plugins apply
- link_plugins: Make injected plugins resolvable from node_modules
"""

from __future__ import annotations

from buildport_core.integration.injector import (
    BACKUP_MARKER,
    Integration,
    IntegrationOptions,
    backup_path,
    coerce_version,
    inject_integrations,
    select_integrations,
)
from buildport_core.integration.linker import link_plugins

__all__: list[str] = [
    "BACKUP_MARKER",
    "Integration",
    "IntegrationOptions",
    "backup_path",
    "coerce_version",
    "inject_integrations",
    "select_integrations",
    "link_plugins",
]
