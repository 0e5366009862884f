"""buildport-cli: Command-line interface for buildport.

Commands:
- compile: Generate platform build output from a store-state dump
- validate: Check a store-state dump against the BuildState schema
- inject: Register platform plugins in a site's framework files
- link: Link plugin directories into node_modules
- schema: Export JSON Schema documents
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
