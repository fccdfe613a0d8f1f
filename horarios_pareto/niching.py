"""
Selección por nichos con puntos de referencia (NSGA-III).

Deb K., Jain H. An Evolutionary Many-Objective Optimization Algorithm Using
Reference Point-Based Nondominated Sorting Approach, Part I. IEEE TEVC, 2014.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .rng import RandomContext
from .schedule import Schedule

logger = logging.getLogger(__name__)

ASF_EPS = 1e-6
NORMALIZE_EPS = 1e-10


class ReferencePoint:
    def __init__(self, position: Sequence[float]):
        self.position = np.asarray(position, dtype=float)
        self.member_size = 0
        self.potential_members: Dict[int, float] = {}

    def add_member(self) -> None:
        self.member_size += 1

    def add_potential_member(self, member: int, distance: float) -> None:
        current = self.potential_members.get(member)
        if current is None or distance < current:
            self.potential_members[member] = distance

    def has_potential_member(self) -> bool:
        return bool(self.potential_members)

    def find_closest_member(self) -> int:
        return min(self.potential_members.items(), key=lambda e: (e[1], e[0]))[0]

    def random_member(self, rng: RandomContext) -> int:
        members = sorted(self.potential_members)
        return members[rng.rand_int(len(members))]

    def remove_potential_member(self, member: int) -> None:
        self.potential_members.pop(member, None)


def _simplex_lattice(num_objs: int, divisions: int) -> List[List[float]]:
    points: List[List[float]] = []
    current = [0.0] * num_objs

    def recurse(left: int, element: int) -> None:
        if element == num_objs - 1:
            current[element] = left / divisions
            points.append(list(current))
            return
        for i in range(left + 1):
            current[element] = i / divisions
            recurse(left - i, element + 1)

    recurse(divisions, 0)
    return points


def default_divisions(num_objs: int) -> List[int]:
    return [6] if num_objs < 8 else [3, 2]


def generate_reference_points(num_objs: int, divisions: Sequence[int]) -> List[ReferencePoint]:
    """
    Retícula simplex con `divisions[0]` divisiones por eje. Con dos capas la
    interior se recentra hacia 1/M: (x + 1/M) / 2.
    """
    positions = _simplex_lattice(num_objs, divisions[0])
    if len(divisions) > 1:
        center = 1.0 / num_objs
        for inside in _simplex_lattice(num_objs, divisions[1]):
            positions.append([(x + center) / 2 for x in inside])
    return [ReferencePoint(p) for p in positions]


def perpendicular_distance(direction: np.ndarray, point: np.ndarray) -> float:
    denominator = float(np.dot(direction, direction))
    if denominator <= 0:
        return float("inf")
    k = float(np.dot(direction, point)) / denominator
    return float(np.linalg.norm(k * direction - point))


def translate_objectives(objectives: np.ndarray, first_front: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    """Resta el punto ideal (mínimo por objetivo en el frente 0)."""
    ideal = objectives[list(first_front)].min(axis=0)
    return objectives - ideal, ideal


def asf(objs: np.ndarray, weight: np.ndarray) -> float:
    return float(np.max(objs / np.maximum(weight, ASF_EPS)))


def find_extreme_points(translated: np.ndarray, first_front: Sequence[int]) -> List[int]:
    num_objs = translated.shape[1]
    extremes: List[int] = []
    for f in range(num_objs):
        weight = np.full(num_objs, ASF_EPS)
        weight[f] = 1.0
        best = min(first_front, key=lambda i: (asf(translated[i], weight), i))
        extremes.append(best)
    return extremes


def construct_hyperplane(
    objectives: np.ndarray,
    translated: np.ndarray,
    ideal: np.ndarray,
    extremes: List[int],
) -> np.ndarray:
    """
    Interceptos del hiperplano por los puntos extremos, en el espacio original.
    Con extremos duplicados, sistema singular o interceptos negativos se
    usan los máximos por objetivo (Yuan et al., GECCO 2015).
    """
    num_objs = objectives.shape[1]
    intercepts: Optional[np.ndarray] = None
    if len(set(extremes)) == len(extremes):
        A = translated[extremes]
        b = np.ones(num_objs)
        try:
            x = np.linalg.solve(A, b)
        except np.linalg.LinAlgError:
            x = None
        if x is not None and np.all(np.isfinite(x)) and np.all(x > 0):
            intercepts = ideal + 1.0 / x
    if intercepts is None:
        logger.debug("Hiperplano degenerado, se usan los máximos por objetivo")
        intercepts = objectives.max(axis=0)
    return intercepts


def normalize_objectives(translated: np.ndarray, intercepts: np.ndarray, ideal: np.ndarray) -> np.ndarray:
    width = intercepts - ideal
    width = np.where(np.abs(width) > NORMALIZE_EPS, width, NORMALIZE_EPS)
    return translated / width


def perpendicular_distances(directions: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Matriz (puntos x direcciones) de distancias perpendiculares."""
    norms = np.einsum("ij,ij->i", directions, directions)
    safe = np.where(norms > 0, norms, 1.0)
    k = points @ directions.T / safe
    diff = k[:, :, None] * directions[None, :, :] - points[:, None, :]
    distances = np.linalg.norm(diff, axis=2)
    distances[:, norms <= 0] = np.inf
    return distances


def associate(rps: List[ReferencePoint], normalized: np.ndarray, fronts: List[List[int]]) -> None:
    directions = np.array([rp.position for rp in rps])
    last = len(fronts) - 1
    for t, front in enumerate(fronts):
        distances = perpendicular_distances(directions, normalized[front])
        for row, member in enumerate(front):
            nearest = int(np.argmin(distances[row]))
            if t != last:
                rps[nearest].add_member()
            else:
                rps[nearest].add_potential_member(member, float(distances[row, nearest]))


def find_niche_reference_point(rps: List[ReferencePoint], rng: RandomContext) -> int:
    min_size = min(rp.member_size for rp in rps)
    candidates = [r for r, rp in enumerate(rps) if rp.member_size == min_size]
    return candidates[rng.rand_int(len(candidates))]


def select_cluster_member(rp: ReferencePoint, rng: RandomContext) -> int:
    if not rp.has_potential_member():
        return -1
    if rp.member_size == 0:
        return rp.find_closest_member()
    return rp.random_member(rng)


def niching_selection(
    population: Sequence[Schedule],
    fronts: List[List[int]],
    cap: int,
    rps: List[ReferencePoint],
    rng: RandomContext,
) -> List[int]:
    """Retorna los índices admitidos ordenados por aptitud descendente."""
    last = 0
    next_size = 0
    while next_size < cap and last < len(fronts):
        next_size += len(fronts[last])
        last += 1
    fronts = fronts[:last]
    for rank, front in enumerate(fronts):
        for i in front:
            population[i].rank = rank

    selected = [i for front in fronts[:-1] for i in front]
    if next_size <= cap:
        selected.extend(fronts[-1])
        return _by_fitness(population, selected)

    objectives = np.array([population[i].objectives for i in range(len(population))], dtype=float)
    translated, ideal = translate_objectives(objectives, fronts[0])
    extremes = find_extreme_points(translated, fronts[0])
    intercepts = construct_hyperplane(objectives, translated, ideal, extremes)
    normalized = normalize_objectives(translated, intercepts, ideal)

    associate(rps, normalized, fronts)

    rps = list(rps)
    while len(selected) < cap and rps:
        r = find_niche_reference_point(rps, rng)
        chosen = select_cluster_member(rps[r], rng)
        if chosen < 0:
            # sin miembros potenciales en el último frente, se descarta el punto
            rps.pop(r)
            continue
        rps[r].add_member()
        rps[r].remove_potential_member(chosen)
        selected.append(chosen)

    return _by_fitness(population, selected)


def _by_fitness(population: Sequence[Schedule], indices: List[int]) -> List[int]:
    return sorted(indices, key=lambda i: (-population[i].fitness, i))
