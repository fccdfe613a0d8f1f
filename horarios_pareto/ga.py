import logging
from typing import Dict, List, Optional

from .config import GAConfig
from .initial_population import build_initial_population
from .model import Catalog
from .rng import RandomContext
from .schedule import Schedule
from .strategies import (
    CrowdingReplacement,
    DifferentialVariation,
    DiscreteVariation,
    NichingReplacement,
    PollinationVariation,
)

logger = logging.getLogger(__name__)

MAX_CROSSOVER_PROBABILITY = 0.95
MAX_MUTATION_PROBABILITY = 0.30


class ParetoEngine:
    """
    Motor generacional: Inicio -> {cruce -> mutación -> unión -> ranking ->
    selección -> terminación}* -> Fin.

    La variación y el reemplazo son estrategias elegidas al construir el motor.
    """

    def __init__(
        self,
        catalog: Catalog,
        cfg: GAConfig,
        variation,
        replacement,
        rng: Optional[RandomContext] = None,
        stagnation_eps: float = 1e-6,
        reseed_on_reform: bool = True,
        max_crossover_probability: float = MAX_CROSSOVER_PROBABILITY,
        max_generations: Optional[int] = None,
        name: str = "pareto",
    ):
        self.catalog = catalog
        self.cfg = cfg
        self.variation = variation
        self.replacement = replacement
        self.rng = rng or RandomContext(cfg.seed)
        self.stagnation_eps = stagnation_eps
        self.reseed_on_reform = reseed_on_reform
        self.max_crossover_probability = max_crossover_probability
        self.max_generations = max_generations
        self.name = name

        self.population_size = cfg.population_size
        self.crossover_probability = cfg.crossover_probability
        self.mutation_probability = cfg.mutation_probability

        self.population: List[Schedule] = []
        self.best: Optional[Schedule] = None
        self.history: List[Dict] = []
        self.reforms = 0

    def initialize(self) -> List[Schedule]:
        self.population = build_initial_population(self.catalog, self.rng, self.population_size)
        self._update_best(self.population)
        return self.population

    def _update_best(self, population: List[Schedule]) -> bool:
        candidate = max(population, key=lambda c: c.fitness)
        if self.best is None or candidate.fitness > self.best.fitness:
            self.best = candidate.copy()
            return True
        return False

    def reform(self) -> None:
        """Respuesta al estancamiento: sube probabilidades y puede resembrar."""
        if self.reseed_on_reform:
            self.rng.reseed()
        if self.crossover_probability < self.max_crossover_probability:
            self.crossover_probability = min(self.max_crossover_probability, self.crossover_probability + 0.01)
        elif not self.variation.reform() and self.mutation_probability < MAX_MUTATION_PROBABILITY:
            self.mutation_probability = min(MAX_MUTATION_PROBABILITY, self.mutation_probability + 0.01)
        self.reforms += 1

    def step(self) -> List[Schedule]:
        """Ejecuta una generación y retorna la nueva población."""
        offspring = self.variation.produce(self.population, self)
        for child in offspring:
            child.mutation(self.cfg.mutation_size, self.mutation_probability)

        merged = self.population + offspring
        self.population = self.replacement.select(merged, self.population_size, self.rng)
        self._update_best(self.population)
        return self.population

    def run(self, max_repeat: Optional[int] = None, min_fitness: Optional[float] = None) -> Schedule:
        max_repeat = self.cfg.max_repeat if max_repeat is None else max_repeat
        min_fitness = self.cfg.min_fitness if min_fitness is None else min_fitness
        if not self.population:
            self.initialize()

        generation = 0
        best_not_enhance = 0
        last_best_fit = self.best.fitness

        while self.best.fitness <= min_fitness:
            if self.max_generations is not None and generation >= self.max_generations:
                break

            self.step()
            generation += 1

            if abs(self.best.fitness - last_best_fit) <= self.stagnation_eps:
                best_not_enhance += 1
            else:
                last_best_fit = self.best.fitness
                best_not_enhance = 0

            if best_not_enhance > max_repeat // 100:
                self.reform()
                logger.info(
                    "Gen %d: reforma (cruce=%.2f, mutación=%.2f, estancado=%d)",
                    generation,
                    self.crossover_probability,
                    self.mutation_probability,
                    best_not_enhance,
                )

            self._record(generation, best_not_enhance)
            if generation % 50 == 0:
                logger.info("Gen %d: Mejor fitness=%.6f", generation, self.best.fitness)

        logger.info("%s terminó en %d generaciones, fitness=%.6f", self.name, generation, self.best.fitness)
        return self.best

    def _record(self, generation: int, best_not_enhance: int) -> None:
        fronts = getattr(self.replacement, "last_fronts", [])
        avg = sum(c.fitness for c in self.population) / len(self.population)
        self.history.append(
            {
                "gen": generation,
                "best_fitness": self.best.fitness,
                "avg_fitness": avg,
                "front0_size": len(fronts[0]) if fronts else 0,
                "crossover_probability": self.crossover_probability,
                "mutation_probability": self.mutation_probability,
                "stagnation": best_not_enhance,
            }
        )


def build_engine(
    catalog: Catalog,
    cfg: GAConfig,
    algorithm: Optional[str] = None,
    rng: Optional[RandomContext] = None,
) -> ParetoEngine:
    """
    Variantes disponibles:

    - nsga2: cruce discreto + hacinamiento, aptitud como único objetivo.
      Termina por umbral de aptitud o por `max_generations` si se configura.
    - nsga3: cruce diferencial + nichos por puntos de referencia. Misma
      terminación que nsga2.
    - fpa: polinización de flores + nichos, con tope duro `max_iterations`.
    """
    algorithm = algorithm or cfg.algorithm
    if algorithm == "nsga2":
        return ParetoEngine(
            catalog, cfg, DiscreteVariation(), CrowdingReplacement(),
            rng=rng,
            stagnation_eps=1e-7,
            reseed_on_reform=False,
            max_crossover_probability=1.0,
            max_generations=cfg.max_generations,
            name="NSGA II",
        )
    if algorithm == "nsga3":
        return ParetoEngine(
            catalog, cfg, DifferentialVariation(), NichingReplacement(cfg.obj_divisions),
            rng=rng,
            stagnation_eps=1e-6,
            max_generations=cfg.max_generations,
            name="NSGA III",
        )
    if algorithm == "fpa":
        cap = cfg.max_iterations if cfg.max_generations is None else min(cfg.max_iterations, cfg.max_generations)
        return ParetoEngine(
            catalog, cfg, PollinationVariation(cfg.pollination_probability), NichingReplacement(cfg.obj_divisions),
            rng=rng,
            stagnation_eps=1e-6,
            max_generations=cap,
            name="Flower Pollination Algorithm (FPA)",
        )
    raise ValueError(f"Algoritmo desconocido: {algorithm}")
