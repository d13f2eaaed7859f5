"""
Agent Discovery

Scans the agents root for candidate packages. Each direct child that is a
directory (or a symlink) and holds both a manifest and an entry file
becomes a DiscoveryRecord. Anything else is logged and skipped.
"""

import logging
from pathlib import Path
from typing import List

from .errors import ManifestError
from .manifest import read_manifest
from .models import DiscoveryRecord

logger = logging.getLogger("epistery-host.agents.discovery")

MANIFEST_FILENAME = "epistery.json"
ENTRY_FILENAME = "agent.py"


def discover(
    agents_path: str | Path,
    manifest_filename: str = MANIFEST_FILENAME,
    entry_filename: str = ENTRY_FILENAME,
) -> List[DiscoveryRecord]:
    """
    Return discovery records for every valid agent under `agents_path`.

    A missing root is a normal configuration and yields an empty list.
    Records are sorted by local directory name so the result does not
    depend on the order the OS lists entries in.
    """
    root = Path(agents_path).expanduser()

    if not root.exists():
        logger.info(f"No agents directory found: {root}")
        return []

    discovered = []
    # Listing an existing root that we cannot read is fatal on purpose.
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not (entry.is_symlink() or entry.is_dir()):
            logger.debug(f"Skipping non-directory entry: {entry.name}")
            continue

        manifest_path = entry / manifest_filename
        entry_path = entry / entry_filename

        if not manifest_path.is_file():
            logger.warning(f"Agent {entry.name} missing {manifest_filename}, skipping")
            continue

        if not entry_path.is_file():
            logger.warning(f"Agent {entry.name} missing {entry_filename}, skipping")
            continue

        try:
            manifest = read_manifest(manifest_path)
        except ManifestError as e:
            logger.error(f"Failed to read manifest for agent {entry.name}: {e}")
            continue

        discovered.append(DiscoveryRecord(
            local_name=entry.name,
            path=entry.absolute(),
            manifest=manifest,
            entry_path=entry_path.absolute(),
        ))
        logger.info(f"Discovered agent: {manifest.name} v{manifest.version}")

    return discovered
