"""Facility equipment models."""

from dataclasses import dataclass

from ..errors import MalformedRecordError


@dataclass
class EquipmentItem:
    """A named equipment item and how many units the facility owns.

    The quantity is fixed for the duration of a session; the engine never
    mutates it.
    """

    name: str
    quantity: int
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {"name": self.name, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "EquipmentItem":
        """Create from dictionary."""
        name = data.get("name")
        quantity = data.get("quantity")
        if not isinstance(name, str) or not name:
            raise MalformedRecordError(f"Equipment name must be a non-empty string: {data!r}")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 0:
            raise MalformedRecordError(
                f"Equipment {name!r} has invalid quantity {quantity!r}"
            )
        return cls(id=id, name=name, quantity=quantity)


@dataclass
class Availability:
    """Result of an equipment availability check."""

    available: bool
    conflicts: list[str]

    def to_dict(self) -> dict:
        return {"available": self.available, "conflicts": list(self.conflicts)}


@dataclass
class EquipmentUsage:
    """Occupancy of one equipment item within a session."""

    name: str
    total: int
    in_use: int

    @property
    def available(self) -> int:
        return max(self.total - self.in_use, 0)

    @property
    def is_available(self) -> bool:
        return self.total > self.in_use

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "total": self.total,
            "in_use": self.in_use,
            "available": self.available,
            "is_available": self.is_available,
        }


# Standard small-group training floor
DEFAULT_FACILITY: list[EquipmentItem] = [
    EquipmentItem(name="Olympic Barbell", quantity=2),
    EquipmentItem(name="Trap Bar", quantity=1),
    EquipmentItem(name="Squat Rack", quantity=1),
    EquipmentItem(name="Lifting Platform", quantity=1),
    EquipmentItem(name="Landmine", quantity=1),
    EquipmentItem(name="Flat Bench", quantity=2),
    EquipmentItem(name="Cable Station", quantity=1),
    EquipmentItem(name="Resistance Band", quantity=4),
    EquipmentItem(name="Dumbbells 10kg", quantity=1),
    EquipmentItem(name="Dumbbells 12.5kg", quantity=1),
    EquipmentItem(name="Dumbbells 15kg", quantity=1),
    EquipmentItem(name="Dumbbells 17.5kg", quantity=1),
    EquipmentItem(name="Kettlebell 16kg", quantity=2),
    EquipmentItem(name="Kettlebell 20kg", quantity=2),
    EquipmentItem(name="Kettlebell 24kg", quantity=2),
]
