"""
Contexto de aleatoriedad inyectable.

El motor es dueño de una única instancia y la comparte con todos los
cromosomas; `reseed()` solo se invoca desde la transición de reforma. La nueva
semilla se obtiene del propio generador, así una corrida con semilla fija es
reproducible.
"""
import random
from typing import List, MutableSequence, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomContext:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)
        self.reseeds = 0

    def reseed(self, seed: Optional[int] = None) -> int:
        if seed is None:
            seed = self._random.getrandbits(32)
        self.seed = seed
        self._random.seed(seed)
        self.reseeds += 1
        return seed

    def rand_int(self, n: int) -> int:
        """Entero uniforme en [0, n)."""
        return self._random.randrange(n)

    def random(self) -> float:
        return self._random.random()

    def gauss(self, mu: float = 0.0, sigma: float = 1.0) -> float:
        return self._random.gauss(mu, sigma)

    def chance(self, probability: float) -> bool:
        return self._random.random() < probability

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        return self._random.sample(items, k)

    def shuffle(self, items: MutableSequence) -> None:
        self._random.shuffle(items)
