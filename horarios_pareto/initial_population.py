# horarios_pareto/initial_population.py
from typing import List, Optional

from .model import Catalog
from .rng import RandomContext
from .schedule import Schedule


def build_random_individual(
    prototype: Schedule,
    positions: Optional[List[float]] = None,
) -> Schedule:
    return prototype.make_new_from_prototype(positions)


def build_initial_population(
    catalog: Catalog,
    rng: RandomContext,
    pop_size: int,
) -> List[Schedule]:
    if catalog.number_of_rooms == 0:
        raise ValueError("El catálogo no tiene aulas")
    if catalog.number_of_classes == 0:
        raise ValueError("El catálogo no tiene clases")
    prototype = Schedule(catalog, rng)
    return [build_random_individual(prototype) for _ in range(pop_size)]
