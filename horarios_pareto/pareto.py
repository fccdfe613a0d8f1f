"""
Ordenamiento no dominado rápido y distancia de hacinamiento (NSGA-II).

Las funciones trabajan con índices sobre la población combinada
(padres + hijos) y una política de dominancia intercambiable. Cada política
puede construir la matriz de dominancia completa de una sola vez.
"""
import math
from typing import Callable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .schedule import Schedule

Dominates = Callable[[Schedule, Schedule], bool]


class FitnessDominance:
    """Caso degenerado de un solo objetivo: mayor aptitud es mejor."""

    name = "fitness"

    @staticmethod
    def values(chromosome: Schedule) -> Tuple[float, ...]:
        return (chromosome.fitness,)

    @staticmethod
    def dominates(left: Schedule, right: Schedule) -> bool:
        return left.fitness > right.fitness

    @staticmethod
    def matrix(population: Sequence[Schedule]) -> np.ndarray:
        fitness = np.array([c.fitness for c in population], dtype=float)
        return fitness[:, None] > fitness[None, :]


class ObjectiveDominance:
    """Vector de objetivos minimizado."""

    name = "objectives"

    @staticmethod
    def values(chromosome: Schedule) -> Tuple[float, ...]:
        return tuple(float(v) for v in chromosome.objectives)

    @staticmethod
    def dominates(left: Schedule, right: Schedule) -> bool:
        return left.dominates(right)

    @staticmethod
    def matrix(population: Sequence[Schedule]) -> np.ndarray:
        """`out[p, q]` es True si p domina a q."""
        objs = np.array([c.objectives for c in population], dtype=float)
        left, right = objs[:, None, :], objs[None, :, :]
        return np.all(left <= right, axis=2) & np.any(left < right, axis=2)


def fast_non_dominated_sort(
    population: Sequence,
    dominates: Optional[Dominates] = None,
    matrix: Optional[np.ndarray] = None,
) -> List[List[int]]:
    size = len(population)
    if matrix is None:
        matrix = np.zeros((size, size), dtype=bool)
        for p in range(size):
            for q in range(size):
                if p != q and dominates(population[p], population[q]):
                    matrix[p, q] = True
    if size == 0:
        return []

    dominated: List[List[int]] = [np.flatnonzero(matrix[p]).tolist() for p in range(size)]
    counts = matrix.sum(axis=0).astype(int).tolist()
    fronts: List[List[int]] = [[p for p in range(size) if counts[p] == 0]]

    i = 0
    while fronts[i]:
        next_front: List[int] = []
        for p in fronts[i]:
            for q in dominated[p]:
                counts[q] -= 1
                if counts[q] == 0:
                    next_front.append(q)
        i += 1
        fronts.append(sorted(next_front))
    return fronts[:-1]


def crowding_distance(values: Sequence[Sequence[float]]) -> List[float]:
    """Distancia de hacinamiento de cada miembro de un frente."""
    n = len(values)
    if n == 0:
        return []
    data = np.asarray(values, dtype=float).reshape(n, -1)
    distance = np.zeros(n, dtype=float)
    for m in range(data.shape[1]):
        order = sorted(range(n), key=lambda k: (data[k, m], k))
        distance[order[0]] = math.inf
        distance[order[-1]] = math.inf
        width = data[order[-1], m] - data[order[0], m]
        if width <= 0:
            continue
        for k in range(1, n - 1):
            if math.isinf(distance[order[k]]):
                continue
            distance[order[k]] += (data[order[k + 1], m] - data[order[k - 1], m]) / width
    return distance.tolist()


def crowding_selection(
    population: Sequence[Schedule],
    fronts: List[List[int]],
    values: Callable[[Schedule], Sequence[float]],
    cap: int,
) -> List[int]:
    """
    Llena la siguiente población frente por frente. El frente que desborda se
    ordena por distancia descendente (empates por índice) y los duplicados
    solo entran después de todos los miembros distintos.
    """
    selected: List[int] = []
    seen: Set[Tuple[int, ...]] = set()
    for rank, front in enumerate(fronts):
        distances = crowding_distance([values(population[i]) for i in front])
        for i, d in zip(front, distances):
            population[i].rank = rank
            population[i].diversity = d

        if len(selected) + len(front) <= cap:
            selected.extend(front)
            seen.update(population[i].genotype() for i in front)
            if len(selected) == cap:
                break
            continue

        ordered = [i for _, i in sorted(zip(distances, front), key=lambda e: (-e[0], e[1]))]
        distinct, duplicates = [], []
        for i in ordered:
            key = population[i].genotype()
            if key in seen:
                duplicates.append(i)
            else:
                seen.add(key)
                distinct.append(i)
        selected.extend((distinct + duplicates)[: cap - len(selected)])
        break
    return selected
