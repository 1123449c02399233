# modules/evaluaciones/seniority.py
"""Clasificación de seniority a partir del promedio compuesto."""

from typing import List, Sequence, Union

from .aggregation import CompositeSkillPoint, mean
from .constants import UMBRAL_JUNIOR, UMBRAL_SEMI_SENIOR, UMBRAL_SENIOR
from .schemas import EstadoCumplimiento, SeniorityBand

NIVELES: List[SeniorityBand] = list(SeniorityBand)


def classify(promedio_general: float) -> SeniorityBand:
    """Límite inferior inclusivo: 3.0 ya es Senior."""
    if promedio_general >= UMBRAL_SENIOR:
        return SeniorityBand.SENIOR
    if promedio_general >= UMBRAL_SEMI_SENIOR:
        return SeniorityBand.SEMI_SENIOR
    if promedio_general >= UMBRAL_JUNIOR:
        return SeniorityBand.JUNIOR
    return SeniorityBand.TRAINEE


def band_index(band: Union[SeniorityBand, str]) -> int:
    return NIVELES.index(SeniorityBand(band))


def general_average(points: Sequence[CompositeSkillPoint]) -> float:
    """Promedio de `promedio` sobre todas las skills; 0 sin puntos."""
    return mean([p.promedio for p in points])


def status(
    alcanzado: Union[SeniorityBand, str],
    esperado: Union[SeniorityBand, str]
) -> EstadoCumplimiento:
    idx_alcanzado = band_index(alcanzado)
    idx_esperado = band_index(esperado)

    if idx_alcanzado > idx_esperado:
        return EstadoCumplimiento.SUPERO
    if idx_alcanzado == idx_esperado:
        return EstadoCumplimiento.CUMPLE
    return EstadoCumplimiento.NO_CUMPLE
