# horarios_pareto/data_loader.py
"""
Construye el catálogo a partir de un documento de registros:

    [{"prof": {"id": 1, "name": "..."}},
     {"course": {"id": 1, "name": "..."}},
     {"room": {"name": "R1", "lab": true, "size": 24}},
     {"group": {"id": 1, "name": "1A", "size": 19}},
     {"class": {"professor": 1, "course": 1, "duration": 2, "group": 1, "lab": true}}]

Los registros incompletos o que referencian ids desconocidos se descartan en
silencio (solo queda una línea de depuración en el log).
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import GAConfig
from .model import Catalog, Course, CourseClass, Professor, Room, StudentsGroup

logger = logging.getLogger(__name__)

ENTITY_TAGS = ("prof", "course", "room", "group")


def _as_int(value: Any) -> Optional[int]:
    """Entero o None si el valor no es convertible (null, texto, listas...)."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_professor(data: Dict[str, Any]) -> Optional[Professor]:
    pid = _as_int(data.get("id"))
    if pid is None or "name" not in data:
        return None
    return Professor(id=pid, name=str(data["name"]))


def _parse_course(data: Dict[str, Any]) -> Optional[Course]:
    cid = _as_int(data.get("id"))
    if cid is None or "name" not in data:
        return None
    return Course(id=cid, name=str(data["name"]))


def _parse_group(data: Dict[str, Any]) -> Optional[StudentsGroup]:
    gid = _as_int(data.get("id"))
    size = _as_int(data.get("size"))
    if gid is None or size is None or "name" not in data:
        return None
    return StudentsGroup(id=gid, name=str(data["name"]), size=size)


def _parse_room(data: Dict[str, Any], room_id: int) -> Optional[Room]:
    seats = _as_int(data.get("size"))
    if seats is None or "name" not in data:
        return None
    return Room(id=room_id, name=str(data["name"]), lab=bool(data.get("lab", False)), seats=seats)


def _group_refs(data: Dict[str, Any]) -> List[int]:
    refs: List[int] = []
    for key in ("group", "groups"):
        if key not in data:
            continue
        value = data[key]
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            gid = _as_int(v)
            if gid is None:
                logger.debug("Referencia de grupo inválida %r ignorada", v)
                continue
            refs.append(gid)
    return refs


def build_catalog(records: List[Dict[str, Any]], cfg: Optional[GAConfig] = None) -> Catalog:
    cfg = cfg or GAConfig()
    professors: Dict[int, Professor] = {}
    courses: Dict[int, Course] = {}
    groups: Dict[int, StudentsGroup] = {}
    rooms: Dict[int, Room] = {}
    class_records: List[Dict[str, Any]] = []

    # Los ids de aulas se reinician en cada carga
    next_room_id = 0
    for item in records:
        if not isinstance(item, dict):
            logger.debug("Registro ignorado (no es un mapeo): %r", item)
            continue
        for tag, data in item.items():
            if not isinstance(data, dict):
                logger.debug("Registro '%s' ignorado: %r", tag, data)
                continue
            if tag == "prof":
                entity = _parse_professor(data)
                if entity:
                    professors[entity.id] = entity
            elif tag == "course":
                entity = _parse_course(data)
                if entity:
                    courses[entity.id] = entity
            elif tag == "group":
                entity = _parse_group(data)
                if entity:
                    groups[entity.id] = entity
            elif tag == "room":
                entity = _parse_room(data, next_room_id)
                if entity:
                    rooms[entity.id] = entity
                    next_room_id += 1
            elif tag == "class":
                class_records.append(data)
                continue
            else:
                logger.debug("Etiqueta desconocida '%s' ignorada", tag)
                continue
            if entity is None:
                logger.debug("Registro '%s' incompleto o inválido ignorado: %r", tag, data)

    classes: List[CourseClass] = []
    for data in class_records:
        pid = _as_int(data.get("professor"))
        cid = _as_int(data.get("course"))
        if pid not in professors or cid not in courses:
            logger.debug("Clase descartada, profesor %s o curso %s desconocido", pid, cid)
            continue
        group_ids = []
        for gid in _group_refs(data):
            if gid in groups and gid not in group_ids:
                group_ids.append(gid)
            elif gid not in groups:
                logger.debug("Grupo %s desconocido en clase del curso %s", gid, cid)
        duration = _as_int(data.get("duration", 1))
        if duration is None or not 1 <= duration <= cfg.n_hours:
            logger.debug("Clase del curso %s descartada, duración inválida %r", cid, data.get("duration"))
            continue
        classes.append(
            CourseClass(
                id=len(classes),
                professor_id=pid,
                course_id=cid,
                group_ids=tuple(group_ids),
                seats=sum(groups[g].size for g in group_ids),
                lab_required=bool(data.get("lab", False)),
                duration=duration,
            )
        )

    # Vincular profesores y grupos con sus clases
    professors = {
        pid: Professor(p.id, p.name, tuple(c.id for c in classes if c.professor_id == pid))
        for pid, p in professors.items()
    }
    groups = {
        gid: StudentsGroup(g.id, g.name, g.size, tuple(c.id for c in classes if gid in c.group_ids))
        for gid, g in groups.items()
    }

    return Catalog(
        professors=professors,
        courses=courses,
        groups=groups,
        rooms=rooms,
        classes=tuple(classes),
        n_days=cfg.n_days,
        n_hours=cfg.n_hours,
    )


def load_records(path: str) -> List[Dict[str, Any]]:
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, list):
        raise ValueError(f"{path} debe contener una lista de registros")
    return data


def load_catalog(path: str, cfg: Optional[GAConfig] = None) -> Catalog:
    catalog = build_catalog(load_records(path), cfg)
    logger.info(
        "Catálogo cargado: %d profesores, %d cursos, %d aulas, %d grupos, %d clases",
        len(catalog.professors),
        len(catalog.courses),
        catalog.number_of_rooms,
        len(catalog.groups),
        catalog.number_of_classes,
    )
    return catalog
