from pathlib import Path
from typing import List, Optional, Union

from ietf_groups.config.settings import settings
from ietf_groups.models.collection import GroupCollection
from ietf_groups.models.enums import (
    RESEARCH_GROUP,
    WORKING_GROUP,
    GroupStatus,
    Organization,
)
from ietf_groups.models.group import Group
from ietf_groups.storage.snapshot import load_snapshot


class GroupDataset:
    """Read-only query API over a group snapshot.

    The snapshot is loaded once, on first use, and kept until ``reload()`` is
    called. A missing snapshot file behaves as an empty dataset; a corrupt one
    raises ``SnapshotLoadError`` from whichever accessor first touches it.

    Args:
        path: Snapshot file. Defaults to ``settings.groups_path``.
        collection: Use an already loaded collection instead of a file.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        collection: Optional[GroupCollection] = None,
    ):
        self.path = Path(path) if path is not None else settings.groups_path
        self._collection = collection

    @classmethod
    def from_groups(cls, groups: List[Group]) -> "GroupDataset":
        return cls(collection=GroupCollection(groups=groups))

    @property
    def collection(self) -> GroupCollection:
        if self._collection is None:
            self._collection = load_snapshot(self.path)
        return self._collection

    def reload(self) -> GroupCollection:
        """Drops the loaded collection and reads the snapshot file again."""
        self._collection = load_snapshot(self.path)
        return self._collection

    def groups(self) -> List[Group]:
        return list(self.collection.groups)

    def find_group(self, abbreviation: str) -> Optional[Group]:
        return self.collection.find(abbreviation)

    def group_exists(self, abbreviation: str) -> bool:
        return self.collection.exists(abbreviation)

    def ietf_groups(self) -> List[Group]:
        return self.collection.filter(organization=Organization.IETF)

    def irtf_groups(self) -> List[Group]:
        return self.collection.filter(organization=Organization.IRTF)

    def working_groups(self) -> List[Group]:
        return self.collection.filter(type=WORKING_GROUP)

    def research_groups(self) -> List[Group]:
        return self.collection.filter(type=RESEARCH_GROUP)

    def groups_by_type(self, group_type: str) -> List[Group]:
        return self.collection.filter(type=group_type)

    def groups_by_area(self, area: str) -> List[Group]:
        return self.collection.filter(area=area)

    def active_groups(self) -> List[Group]:
        return self.collection.filter(status=GroupStatus.ACTIVE)

    def concluded_groups(self) -> List[Group]:
        return self.collection.filter(status=GroupStatus.CONCLUDED)

    def group_types(self) -> List[str]:
        return self.collection.distinct_types()

    def areas(self) -> List[str]:
        return self.collection.distinct_areas()
