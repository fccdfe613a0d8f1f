# horarios_pareto/evaluation.py
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .encoding import Reservation
from .model import Catalog
from .occupancy import OccupancyGrid

# Criterios por clase, en orden de evaluación
CRITERIA = ("R", "S", "L", "P", "G")
CRITERIA_NUM = len(CRITERIA)
CRITERIA_DESCR = (
    "Current room has {}overlapping",
    "Current room has {}enough seats",
    "Current room with {}enough computers if they are required",
    "Professors have {}overlapping classes",
    "Student groups has {}overlapping classes",
)

# 0 = el fallo anula el puntaje acumulado (solapes), .5 = lo reduce a la mitad (recursos)
CRITERIA_WEIGHTS = (0.0, 0.5, 0.5, 0.0, 0.0)

# Penalización por clase en el vector de objetivos (se minimiza)
OBJECTIVE_PENALTIES = tuple(1.0 if w > 0 else 2.0 for w in CRITERIA_WEIGHTS)


@dataclass
class EvaluationResult:
    score: int
    fitness: float
    criteria: List[bool]
    objectives: np.ndarray


def _overlaps_prof_group(catalog: Catalog, grid: OccupancyGrid, class_id: int, reservation: Reservation):
    cc = catalog.classes[class_id]
    po = go = False
    for idx in catalog.codec.same_time_slots(reservation.day, reservation.time, cc.duration):
        for other_id in grid.occupants(idx):
            if other_id == class_id:
                continue
            other = catalog.classes[other_id]
            if not po and cc.professor_overlaps(other):
                po = True
            if not go and cc.groups_overlap(other):
                go = True
            if po and go:
                return po, go
    return po, go


def evaluate(
    catalog: Catalog,
    reservations: Sequence[Optional[Reservation]],
    grid: OccupancyGrid,
) -> EvaluationResult:
    """
    Evalúa los 5 criterios de cada clase en orden de lista.

    El puntaje suma 1 por criterio cumplido; un solape de aula, profesor o
    grupo lo vuelve a 0 y la falta de asientos o de laboratorio lo reduce a la
    mitad (división entera). fitness = puntaje / (clases * 5).
    """
    n_classes = catalog.number_of_classes
    criteria = [False] * (n_classes * CRITERIA_NUM)
    objectives = np.zeros(CRITERIA_NUM, dtype=float)
    score = 0

    for cc in catalog.classes:
        ci = cc.id * CRITERIA_NUM
        reservation = reservations[cc.id]
        if reservation is None:
            objectives += OBJECTIVE_PENALTIES
            continue

        # R: solape de aula en la ventana de la clase
        ro = grid.is_overlapped(reservation, cc.duration)
        score = score + 1 if not ro else 0
        criteria[ci + 0] = not ro

        room = catalog.get_room_by_id(reservation.room)
        # S: asientos suficientes
        criteria[ci + 1] = room is not None and room.seats >= cc.seats
        score = score + 1 if criteria[ci + 1] else score // 2

        # L: laboratorio si se requiere
        criteria[ci + 2] = not cc.lab_required or (room is not None and room.lab)
        score = score + 1 if criteria[ci + 2] else score // 2

        # P y G: solapes de profesor y de grupo en cualquier aula a la misma hora
        po, go = _overlaps_prof_group(catalog, grid, cc.id, reservation)
        score = score + 1 if not po else 0
        criteria[ci + 3] = not po
        score = score + 1 if not go else 0
        criteria[ci + 4] = not go

        for i in range(CRITERIA_NUM):
            if not criteria[ci + i]:
                objectives[i] += OBJECTIVE_PENALTIES[i]

    total = n_classes * CRITERIA_NUM
    fitness = score / total if total else 0.0
    return EvaluationResult(score=score, fitness=fitness, criteria=criteria, objectives=objectives)
