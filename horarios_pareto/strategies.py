"""
Estrategias intercambiables del motor de Pareto.

- Variación ("actualización de posición"): produce los hijos de una generación.
- Reemplazo: elige la siguiente población desde padres + hijos.
"""
import math
from typing import List, Optional, Sequence, TYPE_CHECKING

import numpy as np

from .niching import default_divisions, generate_reference_points, niching_selection
from .pareto import FitnessDominance, ObjectiveDominance, crowding_selection, fast_non_dominated_sort
from .rng import RandomContext
from .schedule import Schedule

if TYPE_CHECKING:  # pragma: no cover
    from .ga import ParetoEngine


# ---------------------------------------------------------------- variación

class DiscreteVariation:
    """Cruce discreto por puntos entre parejas barajadas (familia NSGA-II)."""

    name = "discrete"

    def produce(self, population: List[Schedule], engine: "ParetoEngine") -> List[Schedule]:
        cfg = engine.cfg
        order = list(range(len(population)))
        engine.rng.shuffle(order)
        if len(order) % 2:
            order.append(order[0])

        offspring: List[Schedule] = []
        for m in range(len(order) // 2):
            parent0 = population[order[2 * m]]
            parent1 = population[order[2 * m + 1]]
            offspring.append(parent0.crossover(parent1, cfg.number_of_crossover_points, engine.crossover_probability))
            offspring.append(parent1.crossover(parent0, cfg.number_of_crossover_points, engine.crossover_probability))
        return offspring[: len(population)]

    def reform(self) -> bool:
        return False


class DifferentialVariation:
    """Cruce diferencial con tres ayudantes distintos del padre."""

    name = "differential"

    def produce(self, population: List[Schedule], engine: "ParetoEngine") -> List[Schedule]:
        cfg = engine.cfg
        rng = engine.rng
        size = len(population)
        offspring: List[Schedule] = []
        for i, parent in enumerate(population):
            others = [j for j in range(size) if j != i]
            if len(others) >= 3:
                r1, r2, r3 = rng.sample(others, 3)
            else:
                r1, r2, r3 = (rng.rand_int(size) for _ in range(3))
            offspring.append(
                parent.differential_crossover(
                    population[r1], population[r2], population[r3], cfg.eta_cross, engine.crossover_probability
                )
            )
        return offspring

    def reform(self) -> bool:
        return False


class PollinationVariation:
    """
    Polinización de flores (Yang, 2012) sobre el vector de posiciones.

    Con probabilidad `pollination_probability` el paso es global, un vuelo de
    Lévy hacia la mejor posición conocida; si no, es local, mezclando las
    posiciones de dos individuos al azar.
    """

    name = "pollination"

    def __init__(self, pollination_probability: float = 0.25, beta: float = 1.5):
        self.pollination_probability = pollination_probability
        self.beta = beta
        num = math.gamma(1 + beta) * math.sin(math.pi * beta / 2)
        den = math.gamma((1 + beta) / 2) * beta * 2 ** ((beta - 1) / 2)
        self.sigma_u = (num / den) ** (1 / beta)
        self.sigma_v = 1.0

    def levy_steps(self, rng: RandomContext, size: int) -> np.ndarray:
        u = np.array([rng.gauss(0.0, self.sigma_u) for _ in range(size)])
        v = np.array([rng.gauss(0.0, self.sigma_v) for _ in range(size)])
        return u / np.power(np.maximum(np.abs(v), 1e-12), 1 / self.beta)

    def produce(self, population: List[Schedule], engine: "ParetoEngine") -> List[Schedule]:
        rng = engine.rng
        size = len(population)
        positions = [chromosome.extract_positions() for chromosome in population]
        leader = engine.best if engine.best is not None else max(population, key=lambda c: c.fitness)
        g_best = leader.extract_positions()

        offspring: List[Schedule] = []
        for i, chromosome in enumerate(population):
            current = positions[i]
            if rng.random() < self.pollination_probability or size < 3:
                candidate = current + self.levy_steps(rng, len(current)) * (g_best - current)
            else:
                d1, d2 = rng.sample([j for j in range(size) if j != i], 2)
                eps = np.array([rng.random() for _ in range(len(current))])
                candidate = current + eps * (positions[d1] - positions[d2])
            child = chromosome.make_empty_from_prototype()
            child.update_positions(candidate)
            offspring.append(child)
        return offspring

    def reform(self) -> bool:
        if self.pollination_probability < 0.5:
            self.pollination_probability = min(0.5, self.pollination_probability + 0.01)
            return True
        return False


# ---------------------------------------------------------------- reemplazo

class CrowdingReplacement:
    """Ordenamiento no dominado + distancia de hacinamiento."""

    name = "crowding"

    def __init__(self, dominance=FitnessDominance):
        self.dominance = dominance
        self.last_fronts: List[List[int]] = []

    def select(self, merged: Sequence[Schedule], cap: int, rng: RandomContext) -> List[Schedule]:
        fronts = fast_non_dominated_sort(merged, matrix=self.dominance.matrix(merged))
        self.last_fronts = fronts
        return [merged[i] for i in crowding_selection(merged, fronts, self.dominance.values, cap)]


class NichingReplacement:
    """Ordenamiento no dominado + nichos por puntos de referencia."""

    name = "niching"

    def __init__(self, divisions: Optional[Sequence[int]] = None):
        self.divisions = list(divisions) if divisions else None
        self.dominance = ObjectiveDominance
        self.last_fronts: List[List[int]] = []

    def select(self, merged: Sequence[Schedule], cap: int, rng: RandomContext) -> List[Schedule]:
        fronts = fast_non_dominated_sort(merged, matrix=self.dominance.matrix(merged))
        self.last_fronts = fronts
        num_objs = len(merged[0].objectives)
        rps = generate_reference_points(num_objs, self.divisions or default_divisions(num_objs))
        return [merged[i] for i in niching_selection(merged, fronts, cap, rps, rng)]
