import unittest

import numpy as np

from horarios_pareto.config import GAConfig
from horarios_pareto.data_loader import build_catalog
from horarios_pareto.evaluation import CRITERIA_NUM
from horarios_pareto.initial_population import build_initial_population
from horarios_pareto.operators import POSITION_DIMS
from horarios_pareto.rng import RandomContext


def small_catalog():
    cfg = GAConfig(n_days=3, n_hours=6)
    records = [
        {"prof": {"id": 1, "name": "P1"}},
        {"prof": {"id": 2, "name": "P2"}},
        {"course": {"id": 1, "name": "Algebra"}},
        {"course": {"id": 2, "name": "Redes"}},
        {"room": {"name": "A1", "size": 40}},
        {"room": {"name": "L1", "lab": True, "size": 20}},
        {"room": {"name": "A2", "size": 25}},
        {"group": {"id": 1, "name": "G1", "size": 18}},
        {"group": {"id": 2, "name": "G2", "size": 22}},
        {"class": {"professor": 1, "course": 1, "group": 1, "duration": 2}},
        {"class": {"professor": 1, "course": 1, "group": 2, "duration": 2}},
        {"class": {"professor": 2, "course": 2, "group": 1, "duration": 3, "lab": True}},
        {"class": {"professor": 2, "course": 2, "group": 2, "duration": 1, "lab": True}},
        {"class": {"professor": 1, "course": 2, "groups": [1, 2], "duration": 1}},
    ]
    return build_catalog(records, cfg)


class ScheduleOperatorTests(unittest.TestCase):
    def setUp(self):
        self.catalog = small_catalog()
        self.rng = RandomContext(11)
        self.population = build_initial_population(self.catalog, self.rng, 6)

    def assertConsistent(self, schedule):
        catalog = self.catalog
        self.assertEqual(len(schedule.reservations), catalog.number_of_classes)
        self.assertTrue(all(r is not None for r in schedule.reservations))
        expected = {cc.id: cc.duration for cc in catalog.classes}
        self.assertEqual(schedule.grid.counts(), expected)
        for cc in catalog.classes:
            r = schedule.reservations[cc.id]
            self.assertLessEqual(r.time + cc.duration, catalog.n_hours)
            for idx in catalog.codec.window(r, cc.duration):
                self.assertIn(cc.id, schedule.grid.occupants(idx))
        self.assertEqual(len(schedule.criteria), catalog.number_of_classes * CRITERIA_NUM)

    def test_initial_population_is_consistent(self):
        self.assertEqual(len(self.population), 6)
        for schedule in self.population:
            self.assertConsistent(schedule)

    def test_crossover_takes_each_gene_from_a_parent(self):
        first, second = self.population[0], self.population[1]
        child = first.crossover(second, 2, 1.0)
        self.assertConsistent(child)
        for i, r in enumerate(child.reservations):
            self.assertIn(r, (first.reservations[i], second.reservations[i]))

    def test_crossover_without_probability_copies_first_parent(self):
        first, second = self.population[0], self.population[1]
        child = first.crossover(second, 2, 0.0)
        self.assertIsNot(child, first)
        self.assertIsNot(child.grid.slots, first.grid.slots)
        self.assertEqual(child.genotype(), first.genotype())
        self.assertEqual(child.fitness, first.fitness)

    def test_child_is_independent_from_parents(self):
        first, second = self.population[0], self.population[1]
        child = first.crossover(second, 3, 1.0)
        before = child.genotype()
        counts = child.grid.counts()
        first.mutation(4, 1.0)
        second.mutation(4, 1.0)
        self.assertEqual(child.genotype(), before)
        self.assertEqual(child.grid.counts(), counts)

    def test_copy_is_deep(self):
        original = self.population[0]
        clone = original.copy()
        clone.mutation(5, 1.0)
        self.assertConsistent(original)
        self.assertIsNot(clone.objectives, original.objectives)
        self.assertIsNot(clone.criteria, original.criteria)

    def test_differential_crossover_stays_in_bounds(self):
        parent, r1, r2, r3 = self.population[:4]
        for eta in (0.35, 5.0, -5.0):
            child = parent.differential_crossover(r1, r2, r3, eta, 1.0)
            self.assertConsistent(child)

    def test_differential_crossover_keeps_parent_genes_without_probability(self):
        parent, r1, r2, r3 = self.population[:4]
        child = parent.differential_crossover(r1, r2, r3, 0.35, 0.0)
        self.assertConsistent(child)
        # solo la clase jrand puede cambiar
        self.assertLessEqual(child.difference(parent), 1)

    def test_mutation(self):
        schedule = self.population[0]
        before = schedule.genotype()
        self.assertFalse(schedule.mutation(3, 0.0))
        self.assertEqual(schedule.genotype(), before)

        self.assertTrue(schedule.mutation(3, 1.0))
        self.assertConsistent(schedule)
        fitness = schedule.fitness
        self.assertEqual(schedule.calculate_fitness(), fitness)

    def test_positions_roundtrip(self):
        schedule = self.population[0]
        positions = schedule.extract_positions()
        self.assertEqual(len(positions), self.catalog.number_of_classes * POSITION_DIMS)

        rebuilt = schedule.make_empty_from_prototype()
        rebuilt.update_positions(positions.copy())
        self.assertEqual(rebuilt.genotype(), schedule.genotype())
        self.assertEqual(rebuilt.fitness, schedule.fitness)

    def test_update_positions_clamps_values(self):
        schedule = self.population[0].make_empty_from_prototype()
        positions = np.full(self.catalog.number_of_classes * POSITION_DIMS, 99.4)
        positions[0:3] = (-3.0, -1.2, -7.0)
        adjusted = schedule.update_positions(positions)
        self.assertConsistent(schedule)
        self.assertEqual(adjusted[0:3].tolist(), [0.0, 0.0, 0.0])
        cc = self.catalog.classes[1]
        self.assertEqual(
            adjusted[3:6].tolist(),
            [self.catalog.n_days - 1, self.catalog.n_hours - cc.duration, self.catalog.number_of_rooms - 1],
        )

    def test_update_positions_rejects_wrong_length(self):
        schedule = self.population[0].make_empty_from_prototype()
        with self.assertRaises(ValueError):
            schedule.update_positions(np.zeros(4))

    def test_assign_twice_raises(self):
        schedule = self.population[0]
        with self.assertRaises(ValueError):
            schedule.assign(0, schedule.reservations[1])

    def test_empty_catalog_cannot_start(self):
        catalog = build_catalog([{"room": {"name": "A", "size": 10}}])
        with self.assertRaises(ValueError):
            build_initial_population(catalog, RandomContext(1), 4)


if __name__ == "__main__":
    unittest.main()
