# modules/evaluaciones/filters.py
"""
Visibilidad por rol y resolución del equipo de un líder.

Se aplican en el borde, antes de llegar al motor de agregación: las
funciones de cálculo nunca leen `evaluador_email`.
"""

from typing import Dict, List, Sequence
import logging

from .schemas import EvaluationRecord, EvaluatorType, FormOrigin, SkillType, UserRole, Usuario

logger = logging.getLogger("EvaluacionesFiltros")

ROLES_VISION_TOTAL = (UserRole.RRHH, UserRole.DIRECTOR)


def filter_evaluations_by_role(
    records: Sequence[EvaluationRecord],
    usuario: Usuario
) -> List[EvaluationRecord]:
    """
    - RRHH / Director: todo
    - Lider: solo su área
    - Analista: solo sus propios registros
    """
    if usuario.rol in ROLES_VISION_TOTAL:
        return list(records)
    if usuario.rol == UserRole.LIDER:
        return [e for e in records if e.area == usuario.area]
    if usuario.rol == UserRole.ANALISTA:
        return [e for e in records if e.evaluado_email == usuario.email]
    return []


def can_see_all(rol: UserRole) -> bool:
    return rol in ROLES_VISION_TOTAL


def can_export(rol: UserRole) -> bool:
    return rol in ROLES_VISION_TOTAL


def get_unique_areas(records: Sequence[EvaluationRecord]) -> List[str]:
    return sorted({e.area for e in records})


def get_unique_hard_skill_areas(records: Sequence[EvaluationRecord]) -> List[str]:
    """Áreas con al menos una skill HARD (carrusel del radar técnico)."""
    return sorted({e.area for e in records if e.skill_tipo == SkillType.HARD})


def get_unique_evaluados(records: Sequence[EvaluationRecord]) -> List[Dict[str, str]]:
    """Evaluados únicos (email + nombre completo), ordenados por nombre."""
    nombres: Dict[str, str] = {}
    for record in records:
        nombres.setdefault(record.evaluado_email, record.nombre_completo)

    evaluados = [{"email": email, "nombre": nombre} for email, nombre in nombres.items()]
    return sorted(evaluados, key=lambda e: e["nombre"].lower())


def _normalizar_email(email: str) -> str:
    return (email or "").strip().lower()


def resolve_team_evaluations(
    records: Sequence[EvaluationRecord],
    usuario: Usuario
) -> List[EvaluationRecord]:
    """
    Evaluaciones JEFE del equipo de un líder.

    Si alguna evaluación JEFE trae `evaluador_email`, el equipo son las
    evaluaciones hechas por el usuario. Si la planilla no trae ese campo
    se usa el fallback por área + origen LIDER, excluyendo al propio usuario.
    """
    jefe = [e for e in records if e.tipo_evaluador == EvaluatorType.JEFE]
    con_evaluador = [e for e in jefe if e.evaluador_email.strip()]

    if con_evaluador:
        email_usuario = _normalizar_email(usuario.email)
        return [e for e in con_evaluador if _normalizar_email(e.evaluador_email) == email_usuario]

    logger.warning(
        "Las evaluaciones no traen evaluador_email. Usando fallback por área + origen."
    )
    return [
        e for e in jefe
        if e.area == usuario.area
        and e.origen == FormOrigin.LIDER
        and e.evaluado_email != usuario.email
    ]
