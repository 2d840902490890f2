from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .enums import GroupStatus, Organization
from .group import Group


def _same_text(value: Optional[str], wanted: str) -> bool:
    return value is not None and value.lower() == str(wanted).lower()


class GroupCollection(BaseModel):
    """Ordered, read-only sequence of groups in discovery order.

    Duplicated abbreviations are kept as scraped; lookups return the first match.
    """

    model_config = ConfigDict(frozen=True)

    groups: Tuple[Group, ...] = ()

    def __len__(self) -> int:
        return len(self.groups)

    def find(self, abbreviation: str) -> Optional[Group]:
        """Returns the first group whose abbreviation matches, ignoring case."""
        for group in self.groups:
            if group.matches(abbreviation):
                return group
        return None

    def exists(self, abbreviation: str) -> bool:
        return self.find(abbreviation) is not None

    def filter(
        self,
        organization: Optional[Union[Organization, str]] = None,
        type: Optional[str] = None,
        area: Optional[str] = None,
        status: Optional[Union[GroupStatus, str]] = None,
    ) -> List[Group]:
        """Returns every group matching all given criteria, in collection order.

        Organization and status must match exactly; type and area ignore case.
        Groups without an area never match an area criterion.
        """
        result = []
        for group in self.groups:
            if organization is not None and group.organization != organization:
                continue
            if type is not None and not _same_text(group.type, type):
                continue
            if area is not None and not _same_text(group.area, area):
                continue
            if status is not None and group.status != status:
                continue
            result.append(group)
        return result

    def distinct_types(self) -> List[str]:
        return sorted({group.type for group in self.groups})

    def distinct_areas(self) -> List[str]:
        return sorted({group.area for group in self.groups if group.area is not None})
