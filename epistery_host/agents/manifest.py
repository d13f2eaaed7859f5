"""
Manifest Reader

Parses an agent's epistery.json into an AgentManifest. Pure function of
the file contents; nothing shared is touched.
"""

import json
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from .errors import ManifestNotFoundError, ManifestParseError, ManifestValidationError
from .models import AgentManifest


def read_manifest(path: str | Path, required: Iterable[str] = ()) -> AgentManifest:
    """
    Read and validate a manifest file.

    `required` lists JSON keys that must be present and non-empty. Discovery
    passes none: a missing `name` is the loader's call, not the reader's.
    """
    path = Path(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestNotFoundError(f"Manifest not found: {path}")
    except IsADirectoryError:
        raise ManifestNotFoundError(f"Manifest path is a directory: {path}")

    return parse_manifest(raw, required=required, source=str(path))


def parse_manifest(raw: str, required: Iterable[str] = (), source: str = "<string>") -> AgentManifest:
    """Validate manifest text. See read_manifest."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestParseError(f"Invalid JSON in {source}: {e}")

    if not isinstance(data, dict):
        raise ManifestParseError(f"Manifest {source} must be a JSON object, got {type(data).__name__}")

    missing = sorted(key for key in required if not data.get(key))
    if missing:
        raise ManifestValidationError(f"Manifest {source} is missing required fields: {missing}")

    try:
        return AgentManifest.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ManifestValidationError(f"Manifest {source} has invalid fields: {fields}")
