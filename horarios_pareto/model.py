# horarios_pareto/model.py
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .encoding import ReservationCodec


@dataclass(frozen=True)
class Professor:
    id: int
    name: str
    class_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Course:
    id: int
    name: str


@dataclass(frozen=True)
class StudentsGroup:
    id: int
    name: str
    size: int
    class_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Room:
    id: int             # asignado secuencialmente en cada carga (0, 1, 2...)
    name: str
    lab: bool
    seats: int


@dataclass(frozen=True)
class CourseClass:
    # Una sesión de clase; `id` es su posición estable en el catálogo
    id: int
    professor_id: int
    course_id: int
    group_ids: Tuple[int, ...]
    seats: int          # suma de los tamaños de los grupos
    lab_required: bool
    duration: int       # horas

    def professor_overlaps(self, other: "CourseClass") -> bool:
        return self.professor_id == other.professor_id

    def groups_overlap(self, other: "CourseClass") -> bool:
        return not set(self.group_ids).isdisjoint(other.group_ids)


@dataclass(frozen=True)
class Catalog:
    """Catálogo inmutable del problema, compartido por todos los cromosomas."""
    professors: Dict[int, Professor]
    courses: Dict[int, Course]
    groups: Dict[int, StudentsGroup]
    rooms: Dict[int, Room]
    classes: Tuple[CourseClass, ...]
    n_days: int = 5
    n_hours: int = 12
    codec: ReservationCodec = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, "codec", ReservationCodec(self.n_days, self.n_hours, max(len(self.rooms), 1))
        )

    @property
    def number_of_rooms(self) -> int:
        return len(self.rooms)

    @property
    def number_of_classes(self) -> int:
        return len(self.classes)

    def get_room_by_id(self, room_id: int) -> Optional[Room]:
        return self.rooms.get(room_id)

    def get_professor_by_id(self, professor_id: int) -> Optional[Professor]:
        return self.professors.get(professor_id)

    def get_course_by_id(self, course_id: int) -> Optional[Course]:
        return self.courses.get(course_id)

    def get_group_by_id(self, group_id: int) -> Optional[StudentsGroup]:
        return self.groups.get(group_id)
