"""Store-state dump loading.

The framework's store state is handed to the CLI as a JSON or YAML file.
``.yaml``/``.yml`` files are parsed with PyYAML, everything else as JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from buildport_cli.errors import CLIError, handle_file_not_found, handle_yaml_error

YAML_SUFFIXES = (".yaml", ".yml")


def load_state_file(file_path: str | Path) -> dict[str, Any]:
    """Read a store-state dump.

    Args:
        file_path: JSON or YAML file.

    Returns:
        The parsed mapping.

    Raises:
        CLIError: Missing file (exit 2), unparsable content or a
            non-mapping document (exit 1).
    """
    path = Path(file_path)
    if not path.is_file():
        handle_file_not_found(str(file_path))

    text = path.read_text()
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            handle_yaml_error(e, str(file_path))
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CLIError(
                f"Invalid JSON in {file_path}: line {e.lineno}, column {e.colno}: {e.msg}"
            ) from None

    if not isinstance(data, dict):
        raise CLIError(f"Store state in {file_path} must be a mapping")
    return data
