import argparse
import logging
import time
from pathlib import Path

from horarios_pareto.config import ALGORITHMS, load_config
from horarios_pareto.data_loader import load_catalog
from horarios_pareto.ga import build_engine
from horarios_pareto.report import criteria_summary, export_outputs, schedule_to_dataframe
from horarios_pareto.rng import RandomContext


def print_schedule(best, limit: int = 20):
    df = schedule_to_dataframe(best)
    print("\n" + "=" * 80)
    print("MEJOR HORARIO (primeras clases)")
    print("=" * 80)
    print(df.head(limit).to_string(index=False))
    print("=" * 80 + "\n")


def main():
    parser = argparse.ArgumentParser(description="Horarios de clases con un motor evolutivo multiobjetivo")
    parser.add_argument("--config", default="config.yaml", help="Ruta al archivo de configuración")
    parser.add_argument("--data", default="data/ejemplo.json", help="Documento con profesores, cursos, aulas, grupos y clases")
    parser.add_argument("--algorithm", choices=ALGORITHMS, default=None, help="Variante del motor")
    parser.add_argument("--out", default="outputs", help="Directorio de salida")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log de depuración")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    print("Cargando datos...")
    catalog = load_catalog(args.data, cfg)

    engine = build_engine(catalog, cfg, args.algorithm, rng=RandomContext(cfg.seed))
    print(f"Algoritmo: {engine.name} | Población: {cfg.population_size} | Clases: {catalog.number_of_classes}")

    start = time.perf_counter()
    best = engine.run()
    elapsed = time.perf_counter() - start

    violations = criteria_summary(best)
    print("\n--- MEJOR SOLUCIÓN ---")
    print(f"Fitness: {best.fitness:.6f} | Generaciones: {len(engine.history)} | Tiempo: {elapsed:.2f}s")
    print(" ".join(f"{k}={v}" for k, v in violations.items()))
    print_schedule(best)

    metrics = {
        "algorithm": engine.name,
        "best_fitness": best.fitness,
        "generations_ran": len(engine.history),
        "reforms": engine.reforms,
        "time_sec": elapsed,
        **{f"violations_{k}": v for k, v in violations.items()},
    }
    out_dir = Path(args.out)
    export_outputs(best, out_dir, engine.history, metrics)
    print(f"Se guardaron resultados en {out_dir}/schedule.csv y {out_dir}/criteria.csv")


if __name__ == "__main__":
    main()
