"""Provide a string enum class."""

from enum import Enum
from typing import List


class StrEnum(str, Enum):
    """Enum whose members are also (and must be) strings."""

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def to_list(cls) -> List[str]:
        """Return the values of all members as a list."""
        return [member.value for member in cls]
