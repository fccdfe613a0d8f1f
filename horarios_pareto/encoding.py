"""
Codifica y decodifica reservas (día, hora, aula) en un índice plano de slot:

    índice = día * HORAS * AULAS + aula * HORAS + hora

Es la única fuente de verdad para esta aritmética; la cuadrícula de ocupación
y la evaluación de criterios se apoyan en ella.
"""
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Reservation:
    day: int
    time: int
    room: int


@dataclass(frozen=True)
class ReservationCodec:
    n_days: int
    n_hours: int
    n_rooms: int

    @property
    def size(self) -> int:
        return self.n_days * self.n_hours * self.n_rooms

    @property
    def day_size(self) -> int:
        return self.n_hours * self.n_rooms

    def validate(self, reservation: Reservation, duration: int = 1) -> None:
        if not 0 <= reservation.day < self.n_days:
            raise ValueError(f"Día fuera de rango: {reservation.day}")
        if not 0 <= reservation.room < self.n_rooms:
            raise ValueError(f"Aula fuera de rango: {reservation.room}")
        if duration < 1 or not 0 <= reservation.time <= self.n_hours - duration:
            raise ValueError(
                f"Hora fuera de rango: {reservation.time} (duración {duration}, horas {self.n_hours})"
            )

    def encode(self, reservation: Reservation) -> int:
        self.validate(reservation)
        return (
            reservation.day * self.n_hours * self.n_rooms
            + reservation.room * self.n_hours
            + reservation.time
        )

    def decode(self, index: int) -> Reservation:
        if not 0 <= index < self.size:
            raise ValueError(f"Índice de slot fuera de rango: {index}")
        day, rest = divmod(index, self.day_size)
        room, time = divmod(rest, self.n_hours)
        return Reservation(day=day, time=time, room=room)

    def window(self, reservation: Reservation, duration: int) -> range:
        """Índices de los slots que ocupa una clase de `duration` horas."""
        self.validate(reservation, duration)
        start = self.encode(reservation)
        return range(start, start + duration)

    def same_time_slots(self, day: int, time: int, duration: int) -> Iterator[int]:
        """Slots de todas las aulas a la misma hora, para cada hora de la clase."""
        base = day * self.day_size + time
        for room in range(self.n_rooms):
            start = base + room * self.n_hours
            yield from range(start, start + duration)
