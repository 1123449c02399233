# modules/evaluaciones/aggregation.py
"""
Agregación de puntajes: promedios por tipo de evaluador y puntaje compuesto.

Regla compuesta (política de RRHH):
    con auto y jefe      -> min((auto + jefe) / 2, jefe)
    solo auto            -> auto
    solo jefe o ninguno  -> jefe (0 = sin datos)

La autoevaluación nunca puede llevar el compuesto por encima del jefe.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .constants import SIN_DATOS
from .schemas import EvaluationRecord, EvaluatorType, ExpectedSkillTable, SkillType


@dataclass(frozen=True)
class CompositeSkillPoint:
    """Una skill de una persona en una ventana."""
    skill: str
    esperado: float
    auto: float
    jefe: float
    promedio: float

    @property
    def gap(self) -> float:
        """Brecha absoluta auto vs jefe."""
        return abs(self.auto - self.jefe)


@dataclass
class Acumulador:
    """Sumas parciales de auto/jefe para un grupo de registros."""
    tipo: SkillType = SkillType.HARD
    sum_auto: float = 0.0
    count_auto: int = 0
    sum_jefe: float = 0.0
    count_jefe: int = 0

    def add(self, record: EvaluationRecord) -> None:
        if record.tipo_evaluador == EvaluatorType.AUTO:
            self.sum_auto += record.puntaje
            self.count_auto += 1
        else:
            self.sum_jefe += record.puntaje
            self.count_jefe += 1

    @property
    def auto(self) -> float:
        return self.sum_auto / self.count_auto if self.count_auto else SIN_DATOS

    @property
    def jefe(self) -> float:
        return self.sum_jefe / self.count_jefe if self.count_jefe else SIN_DATOS

    @property
    def promedio(self) -> float:
        return composite_score(self.auto, self.jefe)


def mean(values: Sequence[float]) -> float:
    """Media aritmética; 0 para una secuencia vacía."""
    return sum(values) / len(values) if values else SIN_DATOS


def average_score(
    records: Iterable[EvaluationRecord],
    tipo_evaluador: EvaluatorType,
    skill_nombre: str
) -> float:
    """Promedio de puntaje para un tipo de evaluador y skill. 0 si no hay registros."""
    puntajes = [
        r.puntaje for r in records
        if r.tipo_evaluador == tipo_evaluador and r.skill_nombre == skill_nombre
    ]
    return mean(puntajes)


def composite_score(auto: float, jefe: float) -> float:
    if auto > 0 and jefe > 0:
        return min((auto + jefe) / 2, jefe)
    if auto > 0:
        return auto
    return jefe


def accumulate(records: Iterable[EvaluationRecord]) -> Acumulador:
    """Acumula todos los registros en un solo grupo (sin distinguir skill)."""
    acumulador = Acumulador()
    for record in records:
        acumulador.add(record)
    return acumulador


def composite_of(records: Iterable[EvaluationRecord]) -> float:
    """Compuesto de un conjunto de registros tomando todos los puntajes juntos."""
    return accumulate(records).promedio


def group_by_skill(records: Iterable[EvaluationRecord]) -> Dict[str, Acumulador]:
    """
    Agrupa por nombre de skill conservando el orden de primera aparición.
    El tipo (HARD/SOFT) es el del primer registro de la skill.
    """
    grupos: Dict[str, Acumulador] = {}
    for record in records:
        if record.skill_nombre not in grupos:
            grupos[record.skill_nombre] = Acumulador(tipo=record.skill_tipo)
        grupos[record.skill_nombre].add(record)
    return grupos


def group_by_person(records: Iterable[EvaluationRecord]) -> Dict[str, List[EvaluationRecord]]:
    """Registros por email del evaluado, en orden de primera aparición."""
    personas: Dict[str, List[EvaluationRecord]] = {}
    for record in records:
        personas.setdefault(record.evaluado_email, []).append(record)
    return personas


def get_expected_value(
    tabla: ExpectedSkillTable,
    skill_nombre: str,
    seniority: str,
    rol: str,
    area: str
) -> float:
    return tabla.get(skill_nombre, seniority, rol, area)


def transform_to_skill_points(
    records: Sequence[EvaluationRecord],
    tabla: ExpectedSkillTable,
    seniority_esperado: str,
    rol: str,
    area: str
) -> List[CompositeSkillPoint]:
    """
    Un punto por skill distinta presente en `records`.

    `esperado` = 0 cuando la matriz no define la combinación.
    """
    puntos = []
    for skill, acumulador in group_by_skill(records).items():
        puntos.append(CompositeSkillPoint(
            skill=skill,
            esperado=get_expected_value(tabla, skill, seniority_esperado, rol, area),
            auto=acumulador.auto,
            jefe=acumulador.jefe,
            promedio=acumulador.promedio,
        ))
    return puntos


def person_composite_mean(records: Iterable[EvaluationRecord]) -> Optional[float]:
    """Media de los compuestos por persona; None si nadie tiene datos."""
    compuestos = [accumulate(evals).promedio for evals in group_by_person(records).values()]
    compuestos = [c for c in compuestos if c > 0]
    return mean(compuestos) if compuestos else None
