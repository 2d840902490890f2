# ietf_groups/storage/snapshot.py
"""
Reading and writing group snapshots.

A snapshot is a YAML (or JSON) document with a single ``groups`` key holding
the ordered list of groups. Fields that are ``None`` or were never set are
omitted on write and come back as their defaults on read.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from ietf_groups.models.collection import GroupCollection
from ietf_groups.models.enums import RESEARCH_GROUP, WORKING_GROUP, Organization, OutputFormat

PathLike = Union[str, Path]

WORKING_GROUP_SUFFIX = " Working Group"


class StorageError(Exception):
    """Base exception for snapshot storage errors."""

    pass


class SnapshotLoadError(StorageError):
    """Raised when a snapshot exists but cannot be read or validated."""

    pass


class UnsupportedFormatError(StorageError, ValueError):
    """Raised for an output format other than yaml or json."""

    pass


def parse_format(value: Union[str, OutputFormat]) -> OutputFormat:
    """Validates a user supplied format name before any work is done."""
    try:
        return OutputFormat(str(getattr(value, "value", value)).lower())
    except ValueError:
        supported = ", ".join(f.value for f in OutputFormat)
        raise UnsupportedFormatError(
            f"Unsupported format: {value} (expected one of: {supported})"
        ) from None


def format_for_path(path: PathLike) -> OutputFormat:
    return OutputFormat.JSON if Path(path).suffix.lower() == ".json" else OutputFormat.YAML


def to_document(collection: GroupCollection, native_dates: bool = False) -> Dict[str, Any]:
    """Plain document for a collection.

    Only fields that were set and are not ``None`` are written, so a loaded
    snapshot is written back with the same keys. With ``native_dates`` the
    concluded date stays a ``date`` for YAML to emit unquoted.
    """
    records = []
    for group in collection.groups:
        record = group.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if native_dates and "concluded_date" in record:
            record["concluded_date"] = group.concluded_date
        records.append(record)
    return {"groups": records}


def from_document(data: Any) -> GroupCollection:
    if not isinstance(data, dict):
        raise SnapshotLoadError(
            f"Snapshot must be a mapping with a 'groups' key, got {type(data).__name__}"
        )
    if "groups" not in data:
        raise SnapshotLoadError("Snapshot has no 'groups' key")
    groups = data["groups"]
    if not isinstance(groups, list):
        raise SnapshotLoadError("Snapshot 'groups' must be a list")
    try:
        return GroupCollection(groups=groups)
    except ValidationError as e:
        raise SnapshotLoadError(f"Invalid group data in snapshot: {e}") from e


def to_yaml(collection: GroupCollection) -> str:
    return yaml.safe_dump(
        to_document(collection, native_dates=True), sort_keys=False, allow_unicode=True
    )


def from_yaml(text: str) -> GroupCollection:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SnapshotLoadError(f"Snapshot is not valid YAML: {e}") from e
    return from_document(data)


def to_json(collection: GroupCollection) -> str:
    return json.dumps(to_document(collection), indent=2, ensure_ascii=False)


def from_json(text: str) -> GroupCollection:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Snapshot is not valid JSON: {e}") from e
    return from_document(data)


def serialize(
    collection: GroupCollection, fmt: Union[str, OutputFormat] = OutputFormat.YAML
) -> str:
    fmt = parse_format(fmt)
    return to_json(collection) if fmt == OutputFormat.JSON else to_yaml(collection)


def deserialize(
    text: str, fmt: Union[str, OutputFormat] = OutputFormat.YAML
) -> GroupCollection:
    fmt = parse_format(fmt)
    return from_json(text) if fmt == OutputFormat.JSON else from_yaml(text)


def load_snapshot(path: PathLike) -> GroupCollection:
    """Loads a snapshot file. A missing file is an empty collection."""
    path = Path(path)
    if not path.exists():
        logger.debug(f"No snapshot at {path}, using an empty collection")
        return GroupCollection()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotLoadError(f"Could not read snapshot {path}: {e}") from e

    collection = deserialize(text, format_for_path(path))
    logger.debug(f"Loaded {len(collection)} groups from {path}")
    return collection


def save_to_file(
    collection: GroupCollection,
    path: PathLike,
    fmt: Union[str, OutputFormat] = OutputFormat.YAML,
) -> Path:
    """Writes the collection to path in the given format."""
    text = serialize(collection, fmt)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.success(f"Saved {len(collection)} groups to {path}")
    return path


def workgroup_names(collection: GroupCollection) -> List[str]:
    """Flat list of names: IETF working groups first, then IRTF name/abbreviation pairs."""
    names = [
        group.name[: -len(WORKING_GROUP_SUFFIX)].rstrip()
        if group.name.endswith(WORKING_GROUP_SUFFIX)
        else group.name
        for group in collection.filter(
            organization=Organization.IETF, type=WORKING_GROUP
        )
    ]
    for group in collection.filter(organization=Organization.IRTF, type=RESEARCH_GROUP):
        names.append(group.name)
        names.append(group.abbreviation)
    return names


def dump_name_list(names: List[str]) -> str:
    return json.dumps(names, ensure_ascii=False)


def load_name_list(text: str) -> List[str]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Name list is not valid JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise SnapshotLoadError("Name list must be a JSON array of strings")
    return data
