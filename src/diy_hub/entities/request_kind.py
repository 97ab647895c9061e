"""Request kind enumeration."""

from enum import Enum


class RequestKind(str, Enum):
    """The three request kinds the service answers."""

    MATERIAL = "material"
    PROJECT = "project"
    STEP = "step"
