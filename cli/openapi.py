"""CLI wrapper: Generate the OpenAPI specification."""

from __future__ import annotations

import json
import sys
from pathlib import Path


def write_openapi(output_file: Path) -> dict:
    """Render the app's OpenAPI schema to ``output_file`` and return it."""
    from app.main import create_app

    schema = create_app().openapi()
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2)
        f.write("\n")
    return schema


def main() -> None:
    output_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("docs") / "openapi.json"
    schema = write_openapi(output_file)

    print(f"[OK] OpenAPI schema generated: {output_file}")
    print(f"   Title: {schema['info']['title']}")
    print(f"   Version: {schema['info']['version']}")
    for path, methods in schema["paths"].items():
        for method, details in methods.items():
            print(f"   {method.upper():6} {path:28} {details.get('summary', '')}")
