"""
Operadores genéticos sobre el cromosoma de horario.

Cada hijo se construye sobre un cromosoma vacío con su propia lista de
reservas y su propia cuadrícula de ocupación; nunca se comparten las listas de
slots de los padres.
"""
from typing import List, Optional, TYPE_CHECKING

import numpy as np

from .encoding import Reservation
from .model import Catalog
from .rng import RandomContext

if TYPE_CHECKING:  # pragma: no cover
    from .schedule import Schedule

# Dimensiones de la posición de una clase: día, hora, aula
POSITION_DIMS = 3


def random_reservation(catalog: Catalog, rng: RandomContext, duration: int) -> Reservation:
    day = rng.rand_int(catalog.n_days)
    room = rng.rand_int(catalog.number_of_rooms)
    time = rng.rand_int(catalog.n_hours + 1 - duration)
    return Reservation(day=day, time=time, room=room)


def _clamp(value: int, low: int, high: int) -> int:
    return low if value < low else high if value > high else value


def clamp_reservation(catalog: Catalog, day: int, time: int, room: int, duration: int) -> Reservation:
    """Ajusta cada dimensión a su rango y valida que la clase quepa en el día."""
    reservation = Reservation(
        day=_clamp(day, 0, catalog.n_days - 1),
        time=_clamp(time, 0, catalog.n_hours - duration),
        room=_clamp(room, 0, catalog.number_of_rooms - 1),
    )
    catalog.codec.validate(reservation, duration)
    return reservation


def place_randomly(schedule: "Schedule", positions: Optional[List[float]] = None) -> None:
    catalog = schedule.catalog
    for cc in catalog.classes:
        reservation = random_reservation(catalog, schedule.rng, cc.duration)
        schedule.assign(cc.id, reservation)
        if positions is not None:
            positions.extend((reservation.day, reservation.time, reservation.room))


def discrete_crossover(
    first: "Schedule",
    second: "Schedule",
    number_of_crossover_points: int,
    crossover_probability: float,
) -> "Schedule":
    rng = first.rng
    if not rng.chance(crossover_probability):
        # sin cruce, copia del primer padre
        return first.copy()

    child = first.make_empty_from_prototype()
    size = first.catalog.number_of_classes
    if size == 0:
        child.calculate_fitness()
        return child

    # puntos de cruce distintos, elegidos al azar
    n_points = min(number_of_crossover_points, size)
    cut_points = set(rng.sample(range(size), n_points))

    use_first = rng.chance(0.5)
    for i in range(size):
        source = first if use_first else second
        child.assign(i, source.reservations[i])
        if i in cut_points:
            use_first = not use_first

    child.calculate_fitness()
    return child


def differential_crossover(
    parent: "Schedule",
    r1: "Schedule",
    r2: "Schedule",
    r3: "Schedule",
    eta_cross: float,
    crossover_probability: float,
) -> "Schedule":
    """Cruce diferencial: r3 + eta_cross * (r1 - r2) por dimensión."""
    catalog = parent.catalog
    rng = parent.rng
    size = catalog.number_of_classes
    child = parent.make_empty_from_prototype()
    jrand = rng.rand_int(size) if size else -1

    for cc in catalog.classes:
        i = cc.id
        if i != jrand and not rng.chance(crossover_probability):
            child.assign(i, parent.reservations[i])
            continue
        a, b, c = r1.reservations[i], r2.reservations[i], r3.reservations[i]
        reservation = clamp_reservation(
            catalog,
            day=int(c.day + eta_cross * (a.day - b.day)),
            time=int(c.time + eta_cross * (a.time - b.time)),
            room=int(c.room + eta_cross * (a.room - b.room)),
            duration=cc.duration,
        )
        child.assign(i, reservation)

    child.calculate_fitness()
    return child


def mutate(schedule: "Schedule", mutation_size: int, mutation_probability: float) -> bool:
    """Reubica `mutation_size` clases al azar. Retorna True si hubo mutación."""
    rng = schedule.rng
    catalog = schedule.catalog
    if catalog.number_of_classes == 0 or not rng.chance(mutation_probability):
        return False

    for _ in range(mutation_size):
        class_id = rng.rand_int(catalog.number_of_classes)
        duration = catalog.classes[class_id].duration
        schedule.relocate(class_id, random_reservation(catalog, rng, duration))

    schedule.calculate_fitness()
    return True


def extract_positions(schedule: "Schedule") -> np.ndarray:
    positions = np.zeros(schedule.catalog.number_of_classes * POSITION_DIMS, dtype=float)
    for i, reservation in enumerate(schedule.reservations):
        positions[i * POSITION_DIMS: (i + 1) * POSITION_DIMS] = (
            reservation.day,
            reservation.time,
            reservation.room,
        )
    return positions


def update_positions(schedule: "Schedule", positions: np.ndarray) -> np.ndarray:
    """
    Reconstruye el horario desde un vector de posiciones continuo.

    Redondea y ajusta cada valor a su rango, escribe los valores ajustados de
    vuelta en `positions` y recalcula la aptitud.
    """
    catalog = schedule.catalog
    expected = catalog.number_of_classes * POSITION_DIMS
    if len(positions) != expected:
        raise ValueError(f"Se esperaban {expected} posiciones, se obtuvieron {len(positions)}")

    schedule.clear()
    for cc in catalog.classes:
        k = cc.id * POSITION_DIMS
        reservation = clamp_reservation(
            catalog,
            day=int(round(positions[k])),
            time=int(round(positions[k + 1])),
            room=int(round(positions[k + 2])),
            duration=cc.duration,
        )
        positions[k: k + POSITION_DIMS] = (reservation.day, reservation.time, reservation.room)
        schedule.assign(cc.id, reservation)

    schedule.calculate_fitness()
    return positions
