"""
Configuración del motor evolutivo multiobjetivo.

Incluye un cargador desde YAML (o JSON, que es un subconjunto de YAML) para
dejar los parámetros reproducibles y configurables.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


ALGORITHMS = ("nsga2", "nsga3", "fpa")


@dataclass
class GAConfig:
    # Tiempo
    n_days: int = 5
    n_hours: int = 12

    # Algoritmo genético
    algorithm: str = "nsga2"
    population_size: int = 100
    number_of_crossover_points: int = 2
    mutation_size: int = 2
    crossover_probability: float = 0.8
    mutation_probability: float = 0.03
    eta_cross: float = 0.35
    pollination_probability: float = 0.25
    seed: int = 42

    # Terminación y estancamiento
    min_fitness: float = 0.999
    max_repeat: int = 9999
    max_generations: Optional[int] = None
    max_iterations: int = 5000

    # Divisiones por eje de los puntos de referencia (vacío = automático)
    obj_divisions: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GAConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def __post_init__(self):
        # Debe haber al menos 2 cromosomas en la población
        if self.population_size < 2:
            self.population_size = 2
        if self.n_days < 1 or self.n_hours < 1:
            raise ValueError("n_days y n_hours deben ser positivos")
        if self.algorithm not in ALGORITHMS:
            raise ValueError(f"Algoritmo desconocido: {self.algorithm}")
        for name in ("crossover_probability", "mutation_probability", "pollination_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} debe estar en [0, 1], se obtuvo {value}")
        if self.number_of_crossover_points < 0 or self.mutation_size < 0:
            raise ValueError("number_of_crossover_points y mutation_size no pueden ser negativos")
        if self.max_generations is not None and self.max_generations < 1:
            raise ValueError("max_generations debe ser positivo o None")
        if any(int(p) < 1 for p in self.obj_divisions):
            raise ValueError("obj_divisions solo admite enteros positivos")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_config(path: str = "config.yaml") -> GAConfig:
    data = _load_yaml(Path(path))
    if not isinstance(data, dict):
        raise ValueError("config.yaml debe contener un objeto mapeo")
    return GAConfig.from_dict(data)
