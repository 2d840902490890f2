from enum import Enum


class Organization(str, Enum):
    IETF = "ietf"
    IRTF = "irtf"


class GroupStatus(str, Enum):
    ACTIVE = "active"
    CONCLUDED = "concluded"
    BOF = "bof"
    PROPOSED = "proposed"


class OutputFormat(str, Enum):
    YAML = "yaml"
    JSON = "json"


# Common group type tags used by the datatracker
WORKING_GROUP = "wg"
RESEARCH_GROUP = "rg"
