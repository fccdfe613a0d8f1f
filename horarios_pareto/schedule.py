# horarios_pareto/schedule.py
from typing import Dict, List, Optional, Tuple

import numpy as np

from . import operators
from .encoding import Reservation
from .evaluation import CRITERIA_NUM, evaluate
from .model import Catalog, CourseClass
from .occupancy import OccupancyGrid
from .rng import RandomContext


class Schedule:
    """
    Cromosoma: una asignación completa de cada clase a una reserva.

    Cada instancia es dueña de su lista de reservas (indexada por id de clase)
    y de su cuadrícula de ocupación; el catálogo y el generador aleatorio se
    comparten por referencia.
    """

    def __init__(self, catalog: Catalog, rng: RandomContext):
        self.catalog = catalog
        self.rng = rng
        self.reservations: List[Optional[Reservation]] = [None] * catalog.number_of_classes
        self.grid = OccupancyGrid(catalog.codec)
        self.criteria: List[bool] = [False] * (catalog.number_of_classes * CRITERIA_NUM)
        self.score = 0
        self.fitness = 0.0
        self.objectives = np.zeros(CRITERIA_NUM, dtype=float)
        self.rank = 0
        self.diversity = 0.0

    # ----- construcción -----
    def make_empty_from_prototype(self) -> "Schedule":
        return Schedule(self.catalog, self.rng)

    def make_new_from_prototype(self, positions: Optional[List[float]] = None) -> "Schedule":
        chromosome = self.make_empty_from_prototype()
        operators.place_randomly(chromosome, positions)
        chromosome.calculate_fitness()
        return chromosome

    def copy(self) -> "Schedule":
        clone = self.make_empty_from_prototype()
        clone.reservations = list(self.reservations)
        clone.grid = self.grid.copy()
        clone.criteria = list(self.criteria)
        clone.score = self.score
        clone.fitness = self.fitness
        clone.objectives = self.objectives.copy()
        clone.rank = self.rank
        clone.diversity = self.diversity
        return clone

    # ----- ocupación -----
    def assign(self, class_id: int, reservation: Reservation) -> None:
        if self.reservations[class_id] is not None:
            raise ValueError(f"La clase {class_id} ya tiene reserva")
        self.grid.add(class_id, reservation, self.catalog.classes[class_id].duration)
        self.reservations[class_id] = reservation

    def relocate(self, class_id: int, reservation: Reservation) -> None:
        old = self.reservations[class_id]
        duration = self.catalog.classes[class_id].duration
        if old is None:
            self.grid.add(class_id, reservation, duration)
        else:
            self.grid.move(class_id, old, reservation, duration)
        self.reservations[class_id] = reservation

    def clear(self) -> None:
        self.reservations = [None] * self.catalog.number_of_classes
        self.grid = OccupancyGrid(self.catalog.codec)

    @property
    def classes(self) -> Dict[CourseClass, Reservation]:
        """Tabla clase -> reserva, para consumo externo."""
        return {cc: self.reservations[cc.id] for cc in self.catalog.classes}

    # ----- operadores -----
    def crossover(self, mother: "Schedule", number_of_crossover_points: int, crossover_probability: float) -> "Schedule":
        return operators.discrete_crossover(self, mother, number_of_crossover_points, crossover_probability)

    def differential_crossover(
        self,
        r1: "Schedule",
        r2: "Schedule",
        r3: "Schedule",
        eta_cross: float,
        crossover_probability: float,
    ) -> "Schedule":
        return operators.differential_crossover(self, r1, r2, r3, eta_cross, crossover_probability)

    def mutation(self, mutation_size: int, mutation_probability: float) -> bool:
        return operators.mutate(self, mutation_size, mutation_probability)

    def extract_positions(self) -> np.ndarray:
        return operators.extract_positions(self)

    def update_positions(self, positions: np.ndarray) -> np.ndarray:
        return operators.update_positions(self, positions)

    # ----- evaluación -----
    def calculate_fitness(self) -> float:
        result = evaluate(self.catalog, self.reservations, self.grid)
        self.score = result.score
        self.fitness = result.fitness
        self.criteria = result.criteria
        self.objectives = result.objectives
        return self.fitness

    def dominates(self, other: "Schedule") -> bool:
        """Objetivos minimizados: no peor en ninguno y mejor en al menos uno."""
        return bool(np.all(self.objectives <= other.objectives) and np.any(self.objectives < other.objectives))

    def difference(self, other: "Schedule") -> int:
        return sum(1 for a, b in zip(self.reservations, other.reservations) if a != b)

    def genotype(self) -> Tuple[int, ...]:
        codec = self.catalog.codec
        return tuple(codec.encode(r) if r is not None else -1 for r in self.reservations)

    def __repr__(self) -> str:
        return f"Schedule(fitness={self.fitness:.4f}, rank={self.rank}, objectives={self.objectives.tolist()})"
