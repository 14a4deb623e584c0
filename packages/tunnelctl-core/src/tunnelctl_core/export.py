"""JSON Schema export functions for tunnelctl.

This module exports JSON Schema Draft 2020-12 schemas from the Pydantic
models, for editor autocomplete on tunnels.yaml and for validating
compiled_units.json in other tools.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tunnelctl_core.compiler.models import CompiledUnits
from tunnelctl_core.schemas import TunnelSpec

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"
TUNNEL_SPEC_SCHEMA_ID = "https://tunnelctl.dev/schemas/tunnels.schema.json"
COMPILED_UNITS_SCHEMA_ID = "https://tunnelctl.dev/schemas/compiled-units.schema.json"


def export_tunnel_spec_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the TunnelSpec JSON Schema.

    Args:
        output_path: Optional path to write the schema to. Parent
            directories are created as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_tunnel_spec_schema()
        >>> schema["$schema"]
        'https://json-schema.org/draft/2020-12/schema'
    """
    schema = TunnelSpec.model_json_schema()
    schema["$schema"] = JSON_SCHEMA_DRAFT
    schema["$id"] = TUNNEL_SPEC_SCHEMA_ID

    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def export_compiled_units_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the CompiledUnits JSON Schema.

    Args:
        output_path: Optional path to write the schema to.

    Returns:
        Dictionary containing the JSON Schema.
    """
    schema = CompiledUnits.model_json_schema()
    schema["$schema"] = JSON_SCHEMA_DRAFT
    schema["$id"] = COMPILED_UNITS_SCHEMA_ID

    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def _write_schema_file(schema: dict[str, Any], output_path: Path | str) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2) + "\n")
