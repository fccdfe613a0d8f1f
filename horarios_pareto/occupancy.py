# horarios_pareto/occupancy.py
from typing import Dict, List

from .encoding import Reservation, ReservationCodec


class OccupancyGrid:
    """Lista de clases (por id) que ocupan cada slot tiempo-espacio."""

    def __init__(self, codec: ReservationCodec):
        self.codec = codec
        self.slots: List[List[int]] = [[] for _ in range(codec.size)]

    def add(self, class_id: int, reservation: Reservation, duration: int) -> None:
        for idx in self.codec.window(reservation, duration):
            self.slots[idx].append(class_id)

    def remove(self, class_id: int, reservation: Reservation, duration: int) -> None:
        for idx in self.codec.window(reservation, duration):
            self.slots[idx] = [c for c in self.slots[idx] if c != class_id]

    def move(self, class_id: int, old: Reservation, new: Reservation, duration: int) -> None:
        self.remove(class_id, old, duration)
        self.add(class_id, new, duration)

    def occupants(self, index: int) -> List[int]:
        return self.slots[index]

    def is_overlapped(self, reservation: Reservation, duration: int) -> bool:
        return any(len(self.slots[idx]) > 1 for idx in self.codec.window(reservation, duration))

    def counts(self) -> Dict[int, int]:
        """Cantidad de slots ocupados por cada clase."""
        out: Dict[int, int] = {}
        for slot in self.slots:
            for c in slot:
                out[c] = out.get(c, 0) + 1
        return out

    def copy(self) -> "OccupancyGrid":
        grid = OccupancyGrid.__new__(OccupancyGrid)
        grid.codec = self.codec
        grid.slots = [list(slot) for slot in self.slots]
        return grid
