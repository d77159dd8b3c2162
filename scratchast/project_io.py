"""Archive extraction: read an .sb3 zip into project.json plus opaque resource blobs."""

import os
import zipfile
from dataclasses import dataclass, field
from typing import Dict, Mapping

from .constants import PROJECT_DESCRIPTOR
from .decode import decode_project
from .errors import MissingProjectDescriptor, UnreadableArchive
from .raw_model import RawProject


@dataclass(frozen=True)
class Sb3File:
    project: RawProject
    # Archive entry name -> bytes, project.json excluded
    resources: Dict[str, bytes] = field(default_factory=dict)


def read_entries(archive: zipfile.ZipFile) -> Dict[str, bytes]:
    entries: Dict[str, bytes] = {}
    for info in archive.infolist():
        if info.is_dir():
            continue
        entries[info.filename] = archive.read(info)
    return entries


def read_archive(entries: Mapping[str, bytes]) -> Sb3File:
    """Split already-extracted archive entries into the project and its resources."""
    if PROJECT_DESCRIPTOR not in entries:
        raise MissingProjectDescriptor(f"{len(entries)} entries in archive")
    project = decode_project(entries[PROJECT_DESCRIPTOR])
    resources = {name: data for name, data in entries.items() if name != PROJECT_DESCRIPTOR}
    return Sb3File(project=project, resources=resources)


def load_sb3(sb3_path: str) -> Sb3File:
    if not os.path.exists(sb3_path):
        raise UnreadableArchive(f"{sb3_path} not found")

    try:
        with zipfile.ZipFile(sb3_path, "r") as archive:
            entries = read_entries(archive)
    # RuntimeError and NotImplementedError are how zipfile reports encrypted
    # entries and unsupported compression methods.
    except (zipfile.BadZipFile, OSError, RuntimeError, NotImplementedError) as exc:
        raise UnreadableArchive(f"{sb3_path}: {exc}") from exc

    return read_archive(entries)
