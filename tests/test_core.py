import itertools
import tempfile
import unittest
from pathlib import Path

from horarios_pareto.config import GAConfig, load_config
from horarios_pareto.data_loader import build_catalog
from horarios_pareto.encoding import Reservation, ReservationCodec
from horarios_pareto.evaluation import CRITERIA_NUM, evaluate
from horarios_pareto.occupancy import OccupancyGrid
from horarios_pareto.rng import RandomContext
from horarios_pareto.schedule import Schedule


def two_class_catalog():
    cfg = GAConfig(n_days=1, n_hours=4)
    records = [
        {"prof": {"id": 1, "name": "P1"}},
        {"course": {"id": 1, "name": "C1"}},
        {"room": {"name": "Lab", "lab": True, "size": 10}},
        {"room": {"name": "Aula", "lab": False, "size": 50}},
        {"group": {"id": 1, "name": "G1", "size": 20}},
        {"group": {"id": 2, "name": "G2", "size": 5}},
        {"class": {"professor": 1, "course": 1, "group": 1}},
        {"class": {"professor": 1, "course": 1, "group": 2, "lab": True}},
    ]
    return build_catalog(records, cfg)


def placed(catalog, *reservations):
    schedule = Schedule(catalog, RandomContext(1))
    for class_id, reservation in enumerate(reservations):
        schedule.assign(class_id, reservation)
    schedule.calculate_fitness()
    return schedule


class EncodingTests(unittest.TestCase):
    def test_roundtrip_all_reservations(self):
        codec = ReservationCodec(n_days=2, n_hours=4, n_rooms=3)
        seen = set()
        for day, time, room in itertools.product(range(2), range(4), range(3)):
            r = Reservation(day=day, time=time, room=room)
            idx = codec.encode(r)
            self.assertEqual(codec.decode(idx), r)
            seen.add(idx)
        self.assertEqual(seen, set(range(codec.size)))

    def test_index_layout(self):
        codec = ReservationCodec(n_days=2, n_hours=4, n_rooms=3)
        # día * HORAS * AULAS + aula * HORAS + hora
        self.assertEqual(codec.encode(Reservation(day=1, time=2, room=1)), 18)

    def test_out_of_range_raises(self):
        codec = ReservationCodec(n_days=2, n_hours=4, n_rooms=3)
        with self.assertRaises(ValueError):
            codec.encode(Reservation(day=2, time=0, room=0))
        with self.assertRaises(ValueError):
            codec.decode(codec.size)
        with self.assertRaises(ValueError):
            codec.window(Reservation(day=0, time=3, room=0), 2)


class CatalogTests(unittest.TestCase):
    def test_unknown_references_are_dropped(self):
        records = [
            {"prof": {"id": 1, "name": "P1"}},
            {"course": {"id": 1, "name": "C1"}},
            {"group": {"id": 1, "name": "G1", "size": 10}},
            {"group": {"id": 2, "name": "G2", "size": 15}},
            {"room": {"name": "R1", "size": 30}},
            {"class": {"professor": 1, "course": 1, "groups": [1, 2, 99], "duration": 2}},
            {"class": {"professor": 7, "course": 1, "group": 1}},
            {"class": {"professor": 1, "course": 8, "group": 1}},
            {"prof": {"name": "sin id"}},
        ]
        catalog = build_catalog(records)
        self.assertEqual(catalog.number_of_classes, 1)
        cc = catalog.classes[0]
        self.assertEqual(cc.group_ids, (1, 2))
        self.assertEqual(cc.seats, 25)
        self.assertEqual(cc.duration, 2)
        self.assertFalse(cc.lab_required)
        self.assertEqual(catalog.professors[1].class_ids, (0,))
        self.assertEqual(catalog.groups[2].class_ids, (0,))
        self.assertEqual(len(catalog.professors), 1)

    def test_malformed_values_are_dropped(self):
        base = [
            {"prof": {"id": 1, "name": "P1"}},
            {"course": {"id": 1, "name": "C1"}},
            {"group": {"id": 1, "name": "G1", "size": 10}},
            {"room": {"name": "R1", "size": 30}},
            {"class": {"professor": 1, "course": 1, "group": 1}},
        ]
        malformed = [
            {"class": {"professor": None, "course": 1, "group": 1}},
            {"class": {"professor": "x", "course": 1, "group": 1}},
            {"class": {"professor": 1, "course": [1], "group": 1}},
            {"class": {"professor": 1, "course": 1, "group": 1, "duration": "dos"}},
            {"group": {"id": "g", "name": "G2", "size": 5}},
            {"group": {"id": 3, "name": "G3", "size": None}},
            {"prof": {"id": None, "name": "P2"}},
            {"room": {"name": "R2", "size": "grande"}},
        ]
        for record in malformed:
            catalog = build_catalog(base + [record])
            self.assertEqual(catalog.number_of_classes, 1)
            self.assertEqual(sorted(catalog.professors), [1])
            self.assertEqual(sorted(catalog.groups), [1])
            self.assertEqual(sorted(catalog.rooms), [0])

        catalog = build_catalog(base + [{"class": {"professor": 1, "course": 1, "groups": [1, "abc", None]}}])
        self.assertEqual(catalog.number_of_classes, 2)
        self.assertEqual(catalog.classes[1].group_ids, (1,))

        catalog = build_catalog(base + [{"class": {"professor": 1, "course": 1, "group": "abc"}}])
        self.assertEqual(catalog.classes[1].group_ids, ())
        self.assertEqual(catalog.classes[1].seats, 0)

    def test_room_ids_restart_each_load(self):
        records = [{"room": {"name": "A", "size": 10}}, {"room": {"name": "B", "lab": True, "size": 20}}]
        first = build_catalog(records)
        second = build_catalog(records)
        self.assertEqual(sorted(first.rooms), [0, 1])
        self.assertEqual(sorted(second.rooms), [0, 1])
        self.assertTrue(second.get_room_by_id(1).lab)

    def test_default_duration_is_one(self):
        catalog = two_class_catalog()
        self.assertTrue(all(cc.duration == 1 for cc in catalog.classes))
        self.assertEqual(catalog.codec.size, 1 * 4 * 2)


class OccupancyTests(unittest.TestCase):
    def test_move_leaves_no_stale_entries(self):
        codec = ReservationCodec(n_days=1, n_hours=6, n_rooms=2)
        grid = OccupancyGrid(codec)
        old = Reservation(day=0, time=1, room=0)
        new = Reservation(day=0, time=3, room=1)
        grid.add(4, old, 3)
        grid.add(5, Reservation(day=0, time=2, room=0), 1)
        self.assertTrue(grid.is_overlapped(old, 3))

        grid.move(4, old, new, 3)
        self.assertEqual(grid.counts(), {4: 3, 5: 1})
        self.assertFalse(grid.is_overlapped(new, 3))
        for idx in codec.window(old, 3):
            self.assertNotIn(4, grid.occupants(idx))

    def test_copy_does_not_alias_slots(self):
        codec = ReservationCodec(n_days=1, n_hours=4, n_rooms=1)
        grid = OccupancyGrid(codec)
        grid.add(0, Reservation(0, 0, 0), 2)
        clone = grid.copy()
        clone.add(1, Reservation(0, 0, 0), 1)
        self.assertEqual(grid.occupants(0), [0])
        self.assertEqual(clone.occupants(0), [0, 1])


class EvaluationTests(unittest.TestCase):
    def test_professor_overlap_resets_score(self):
        catalog = two_class_catalog()
        schedule = placed(catalog, Reservation(0, 0, 1), Reservation(0, 0, 0))
        self.assertEqual(schedule.criteria, [True, True, True, False, True, True, True, True, False, True])
        self.assertEqual(schedule.score, 1)
        self.assertAlmostEqual(schedule.fitness, 0.1)
        self.assertEqual(schedule.objectives.tolist(), [0.0, 0.0, 0.0, 4.0, 0.0])

    def test_missing_seats_halves_score(self):
        catalog = two_class_catalog()
        schedule = placed(catalog, Reservation(0, 0, 0), Reservation(0, 1, 0))
        self.assertFalse(schedule.criteria[1])
        self.assertEqual(schedule.score, 8)
        self.assertAlmostEqual(schedule.fitness, 0.8)
        self.assertEqual(schedule.objectives.tolist(), [0.0, 1.0, 0.0, 0.0, 0.0])

    def test_room_overlap_and_missing_lab(self):
        catalog = two_class_catalog()
        schedule = placed(catalog, Reservation(0, 0, 1), Reservation(0, 0, 1))
        self.assertFalse(schedule.criteria[0])
        self.assertFalse(schedule.criteria[CRITERIA_NUM + 0])
        self.assertFalse(schedule.criteria[CRITERIA_NUM + 2])
        self.assertEqual(schedule.score, 1)
        self.assertEqual(schedule.objectives.tolist(), [4.0, 0.0, 1.0, 4.0, 0.0])

    def test_perfect_schedule(self):
        catalog = two_class_catalog()
        schedule = placed(catalog, Reservation(0, 0, 1), Reservation(0, 2, 0))
        self.assertEqual(schedule.fitness, 1.0)
        self.assertTrue(all(schedule.criteria))
        self.assertEqual(schedule.objectives.sum(), 0.0)

    def test_fitness_is_bounded(self):
        catalog = two_class_catalog()
        prototype = Schedule(catalog, RandomContext(3))
        for _ in range(50):
            schedule = prototype.make_new_from_prototype()
            result = evaluate(catalog, schedule.reservations, schedule.grid)
            self.assertGreaterEqual(result.fitness, 0.0)
            self.assertLessEqual(result.fitness, 1.0)
            self.assertAlmostEqual(result.fitness, result.score / (catalog.number_of_classes * CRITERIA_NUM))
            self.assertEqual(len(schedule.criteria), catalog.number_of_classes * CRITERIA_NUM)


class ConfigTests(unittest.TestCase):
    def test_from_dict_ignores_unknown_keys(self):
        cfg = GAConfig.from_dict({"population_size": 30, "desconocido": 1, "algorithm": "nsga3"})
        self.assertEqual(cfg.population_size, 30)
        self.assertEqual(cfg.algorithm, "nsga3")

    def test_population_has_at_least_two(self):
        self.assertEqual(GAConfig(population_size=1).population_size, 2)

    def test_invalid_values_raise(self):
        with self.assertRaises(ValueError):
            GAConfig(crossover_probability=80)
        with self.assertRaises(ValueError):
            GAConfig(algorithm="tabu")

    def test_load_config_from_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("n_days: 3\nmax_generations: 10\nobj_divisions: [3, 2]\n", encoding="utf-8")
            cfg = load_config(str(path))
            self.assertEqual(cfg.n_days, 3)
            self.assertEqual(cfg.max_generations, 10)
            self.assertEqual(cfg.obj_divisions, [3, 2])
            self.assertEqual(load_config(str(Path(tmp) / "no_existe.yaml")), GAConfig())

            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(str(path))


if __name__ == "__main__":
    unittest.main()
