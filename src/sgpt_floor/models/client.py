"""Client profiles."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Client:
    """A training client."""

    name: str
    injury_notes: list[str] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {"name": self.name, "injury_notes": list(self.injury_notes)}

    @classmethod
    def from_dict(
        cls, data: dict, id: int | None = None, created_at: datetime | None = None
    ) -> "Client":
        """Create from dictionary."""
        return cls(
            id=id,
            name=data["name"],
            injury_notes=data.get("injury_notes", []),
            created_at=created_at,
        )
