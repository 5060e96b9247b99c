"""Command model for parsed client instructions."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Command:
    """A named instruction with an optional argument string."""

    name: str
    value: Optional[str] = None

    def __post_init__(self):
        # an empty argument is the same as no argument
        if not self.value:
            self.value = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Command':
        """Create Command instance from a ``{command, value}`` record."""
        return cls(
            name=data['command'],
            value=data.get('value')
        )

    def __repr__(self) -> str:
        return f"Command(name={self.name!r}, value={self.value!r})"
