from datetime import date
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .enums import GroupStatus, Organization


class Group(BaseModel):
    """A single IETF working group or IRTF research group.

    Optional fields are ``None`` when the scraper could not find them. An empty
    string is a real value and is kept as-is when loaded from a snapshot.
    """

    model_config = ConfigDict(frozen=True)  # Make instances immutable

    abbreviation: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    organization: Organization
    type: str = Field(..., description="Group type tag, e.g. wg, rg, area, team.")
    area: Optional[str] = None
    status: GroupStatus = GroupStatus.ACTIVE
    description: Optional[str] = None
    chairs: Tuple[str, ...] = ()
    mailing_list: Optional[str] = None
    mailing_list_archive: Optional[str] = None
    website_url: Optional[str] = None
    charter_url: Optional[str] = None
    # Only set when the status implies conclusion and a date was found
    concluded_date: Optional[date] = None

    def matches(self, abbreviation: str) -> bool:
        """Case-insensitive comparison against the group abbreviation."""
        return self.abbreviation.lower() == str(abbreviation).lower()
