# horarios_pareto/report.py
"""Adaptadores de salida: el mejor horario y el historial como DataFrames/CSV."""
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .evaluation import CRITERIA, CRITERIA_DESCR, CRITERIA_NUM
from .schedule import Schedule

WEEK_DAYS = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")
FIRST_HOUR = 9


def _day_name(day: int) -> str:
    return WEEK_DAYS[day] if day < len(WEEK_DAYS) else str(day)


def schedule_to_dataframe(schedule: Schedule) -> pd.DataFrame:
    catalog = schedule.catalog
    data = []
    for cc, reservation in schedule.classes.items():
        course = catalog.get_course_by_id(cc.course_id)
        professor = catalog.get_professor_by_id(cc.professor_id)
        room = catalog.get_room_by_id(reservation.room)
        data.append(
            {
                "Clase": cc.id,
                "Curso": course.name if course else str(cc.course_id),
                "Profesor": professor.name if professor else str(cc.professor_id),
                "Grupos": "/".join(catalog.groups[g].name for g in cc.group_ids),
                "Lab": cc.lab_required,
                "Dia": _day_name(reservation.day),
                "Hora_Inicio": FIRST_HOUR + reservation.time,
                "Hora_Fin": FIRST_HOUR + reservation.time + cc.duration,
                "Aula": room.name if room else str(reservation.room),
                "Slot": catalog.codec.encode(reservation),
            }
        )
    return pd.DataFrame(data)


def criteria_to_dataframe(schedule: Schedule) -> pd.DataFrame:
    """Una fila por clase y una columna booleana por criterio (R, S, L, P, G)."""
    rows = []
    for cc in schedule.catalog.classes:
        flags = schedule.criteria[cc.id * CRITERIA_NUM: (cc.id + 1) * CRITERIA_NUM]
        rows.append({"Clase": cc.id, **dict(zip(CRITERIA, flags))})
    return pd.DataFrame(rows, columns=["Clase", *CRITERIA])


def criteria_summary(schedule: Schedule) -> Dict[str, int]:
    """Cantidad de clases que violan cada criterio."""
    df = criteria_to_dataframe(schedule)
    return {c: int((~df[c].astype(bool)).sum()) for c in CRITERIA}


def describe_criteria(schedule: Schedule, class_id: int) -> List[str]:
    flags = schedule.criteria[class_id * CRITERIA_NUM: (class_id + 1) * CRITERIA_NUM]
    out = []
    for i, (descr, ok) in enumerate(zip(CRITERIA_DESCR, flags)):
        # S y L describen un recurso presente; R, P y G describen un solape
        if i in (1, 2):
            out.append(descr.format("" if ok else "not "))
        else:
            out.append(descr.format("no " if ok else ""))
    return out


def export_outputs(
    schedule: Schedule,
    out_dir: Path,
    history: Optional[List[Dict]] = None,
    metrics: Optional[Dict] = None,
) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    schedule_to_dataframe(schedule).to_csv(out_dir / "schedule.csv", index=False)
    criteria_to_dataframe(schedule).to_csv(out_dir / "criteria.csv", index=False)
    if history:
        pd.DataFrame(history).to_csv(out_dir / "history.csv", index=False)
    if metrics:
        pd.DataFrame([metrics]).to_csv(out_dir / "metrics.csv", index=False)
