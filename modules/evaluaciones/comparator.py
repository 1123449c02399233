# modules/evaluaciones/comparator.py
"""
Comparación por trimestre calendario: Q anterior vs Q actual de una persona.

Usado por el dashboard individual y por la vista del líder. Las vistas de
ventana móvil (3 meses desde hoy) viven en rolling.py y no deben mezclarse
con esta comparación.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional
import logging

from .aggregation import group_by_skill
from .constants import UMBRAL_DELTA_TENDENCIA
from .periods import filter_in_range, get_quarter_comparison_windows
from .schemas import EvaluationRecord, SkillType

logger = logging.getLogger("EvaluacionesComparador")


# =============================================================================
# DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class SkillPeriodPoint:
    """Promedios de una skill dentro de una ventana."""
    skill: str
    tipo: SkillType
    auto: float
    jefe: float
    promedio: float

    @property
    def gap(self) -> float:
        return abs(self.auto - self.jefe)


@dataclass(frozen=True)
class ComparacionPeriodos:
    anterior: List[SkillPeriodPoint] = field(default_factory=list)
    actual: List[SkillPeriodPoint] = field(default_factory=list)


class TendenciaSkill(str, Enum):
    MEJORO = "mejoro"
    IGUAL = "igual"
    EMPEORO = "empeoro"
    NUEVA = "nueva"


@dataclass
class AnalisisSkills:
    """Nombres de skills agrupados por tendencia."""
    mejoraron: List[str] = field(default_factory=list)
    iguales: List[str] = field(default_factory=list)
    empeoraron: List[str] = field(default_factory=list)
    nuevas: List[str] = field(default_factory=list)


# =============================================================================
# CÁLCULOS
# =============================================================================

def skill_period_points(records: Iterable[EvaluationRecord]) -> List[SkillPeriodPoint]:
    """Un punto por skill presente en `records`, con el compuesto amortiguado."""
    return [
        SkillPeriodPoint(
            skill=skill,
            tipo=acumulador.tipo,
            auto=acumulador.auto,
            jefe=acumulador.jefe,
            promedio=acumulador.promedio,
        )
        for skill, acumulador in group_by_skill(records).items()
    ]


def compare_between_periods(
    records: List[EvaluationRecord],
    now: Optional[datetime] = None
) -> ComparacionPeriodos:
    """
    Particiona los registros en Q anterior y Q actual (trimestres calendario)
    y calcula los puntos por skill de cada uno.
    """
    rango_anterior, rango_actual = get_quarter_comparison_windows(now)

    evals_anterior = filter_in_range(records, rango_anterior)
    evals_actual = filter_in_range(records, rango_actual)
    logger.debug(
        f"Comparación trimestral: {len(evals_anterior)} registros Q anterior, "
        f"{len(evals_actual)} Q actual"
    )

    return ComparacionPeriodos(
        anterior=skill_period_points(evals_anterior),
        actual=skill_period_points(evals_actual),
    )


def classify_delta(delta: float) -> TendenciaSkill:
    """Comparación estricta: un delta de exactamente 0.2 es IGUAL."""
    if delta > UMBRAL_DELTA_TENDENCIA:
        return TendenciaSkill.MEJORO
    if delta < -UMBRAL_DELTA_TENDENCIA:
        return TendenciaSkill.EMPEORO
    return TendenciaSkill.IGUAL


def classify_skill_trend(
    actual: SkillPeriodPoint,
    anterior: Optional[SkillPeriodPoint]
) -> TendenciaSkill:
    if anterior is None:
        return TendenciaSkill.NUEVA
    return classify_delta(actual.promedio - anterior.promedio)


def analyze_skill_changes(comparacion: ComparacionPeriodos) -> AnalisisSkills:
    """
    Clasifica cada skill del Q actual contra el Q anterior.
    Las skills que solo existen en el Q anterior no aparecen.
    """
    anteriores = {p.skill: p for p in comparacion.anterior}
    analisis = AnalisisSkills()
    destino = {
        TendenciaSkill.MEJORO: analisis.mejoraron,
        TendenciaSkill.IGUAL: analisis.iguales,
        TendenciaSkill.EMPEORO: analisis.empeoraron,
        TendenciaSkill.NUEVA: analisis.nuevas,
    }

    for actual in comparacion.actual:
        tendencia = classify_skill_trend(actual, anteriores.get(actual.skill))
        destino[tendencia].append(actual.skill)

    return analisis
