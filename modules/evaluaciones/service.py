# modules/evaluaciones/service.py
"""
Service Layer para el módulo Evaluaciones.

Orquesta las funciones puras de cálculo en los payloads de cada tablero
(individual, comparación trimestral, equipo del líder y vista de RRHH).
No persiste nada: los registros llegan en cada request.
"""
from datetime import datetime
from typing import Dict, List, Optional, Sequence
import logging

from .aggregation import transform_to_skill_points
from .comparator import analyze_skill_changes, compare_between_periods
from .filters import (
    can_export,
    filter_evaluations_by_role,
    get_unique_areas,
    get_unique_evaluados,
    resolve_team_evaluations,
)
from .periods import PERIODOS, PeriodoType, filter_by_period
from .projector import (
    calculate_gap_matrix,
    group_by_month_and_seniority,
    group_by_month_skill_type_and_seniority,
    project_comparison_bars,
    project_dumbbell,
    project_highlights,
    project_quarter_trend,
    project_radar,
    project_strengths,
    seniority_by_email,
    summarize_by_person,
    summarize_organization,
)
from .rolling import (
    calculate_hard_soft_stack,
    calculate_level_jump,
    calculate_level_progress,
    calculate_seniority_trend,
    calculate_skill_breakdown,
    calculate_skill_evolution,
    calculate_top_skill_changes,
    compare_skills_by_period,
    prepare_comparative_radar,
)
from .schemas import (
    EvaluationRecord,
    ExpectedSkillEntry,
    ExpectedSkillTable,
    FormOrigin,
    SeniorityBand,
    SkillType,
    TargetSkill,
    Usuario,
)
from .seniority import classify, general_average, status

logger = logging.getLogger("EvaluacionesService")


class EvaluacionesService:
    """Maneja la lógica de negocio del módulo Evaluaciones."""

    def get_periodos(self) -> List[Dict[str, str]]:
        return PERIODOS

    def build_radar(
        self,
        records: Sequence[EvaluationRecord],
        skills_matrix: Sequence[ExpectedSkillEntry],
        seniority_esperado: SeniorityBand,
        rol: str,
        area: Optional[str] = None,
        periodo: PeriodoType = PeriodoType.HISTORICO,
        evaluado_email: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> dict:
        """
        Tablero individual: radares hard/soft, promedio general, seniority
        alcanzado vs esperado y tendencia trimestral.

        Si no se indica `area`, se toma la del primer registro de cada radar.
        Con `area`, el radar HARD se limita a esa área.
        """
        evals = filter_by_period(list(records), periodo, now)
        if evaluado_email:
            evals = [e for e in evals if e.evaluado_email == evaluado_email]

        tabla = ExpectedSkillTable(skills_matrix)
        seniority = seniority_esperado.value

        hard = [e for e in evals if e.skill_tipo == SkillType.HARD]
        if area:
            hard = [e for e in hard if e.area == area]
        soft = [e for e in evals if e.skill_tipo == SkillType.SOFT]

        area_hard = area or (hard[0].area if hard else "")
        area_soft = soft[0].area if soft else ""
        puntos_hard = transform_to_skill_points(hard, tabla, seniority, rol, area_hard)
        puntos_soft = transform_to_skill_points(soft, tabla, seniority, rol, area_soft)

        promedio_general = general_average(puntos_hard + puntos_soft)
        alcanzado = classify(promedio_general)
        logger.debug(
            f"Radar: {len(puntos_hard)} hard, {len(puntos_soft)} soft, "
            f"promedio {promedio_general:.2f} ({alcanzado.value})"
        )

        return {
            "hard": project_radar(puntos_hard),
            "soft": project_radar(puntos_soft),
            "promedio_general": promedio_general,
            "seniority_alcanzado": alcanzado,
            "seniority_esperado": seniority_esperado,
            "estado": status(alcanzado, seniority_esperado),
            "fortalezas_y_mejoras": project_strengths(puntos_hard + puntos_soft),
            "tendencia_trimestral": project_quarter_trend(hard + soft, tabla, seniority, rol, area_hard),
            "areas_hard": sorted({e.area for e in hard}),
        }

    def compare_quarters(
        self,
        records: Sequence[EvaluationRecord],
        evaluado_email: Optional[str] = None,
        skills_matrix: Sequence[ExpectedSkillEntry] = (),
        seniority_esperado: SeniorityBand = SeniorityBand.JUNIOR,
        rol: str = "",
        area: str = "",
        now: Optional[datetime] = None
    ) -> dict:
        """Comparación Q anterior vs Q actual (trimestres calendario) de una persona."""
        evals = list(records)
        if evaluado_email:
            evals = [e for e in evals if e.evaluado_email == evaluado_email]

        comparacion = compare_between_periods(evals, now)
        barras = project_comparison_bars(comparacion)
        tabla = ExpectedSkillTable(skills_matrix)

        return {
            "comparacion": comparacion,
            "analisis": analyze_skill_changes(comparacion),
            "barras": barras,
            "destacados": {
                SkillType.HARD.value: project_highlights(barras, SkillType.HARD),
                SkillType.SOFT.value: project_highlights(barras, SkillType.SOFT),
            },
            "brechas": project_dumbbell(comparacion, tabla, seniority_esperado.value, rol, area),
        }

    def level_jump(
        self,
        records: Sequence[EvaluationRecord],
        evaluado_email: Optional[str] = None,
        origen: Optional[FormOrigin] = None,
        now: Optional[datetime] = None
    ) -> list:
        return calculate_level_jump(records, evaluado_email, origen, now)

    def person_evolution(
        self,
        records: Sequence[EvaluationRecord],
        evaluado_email: str,
        targets: Sequence[TargetSkill] = (),
        now: Optional[datetime] = None
    ) -> dict:
        """Vista del analista: evolución por skill con ventanas móviles."""
        propias = [e for e in records if e.evaluado_email == evaluado_email]
        return {
            "evolucion": calculate_skill_evolution(propias, targets, now=now),
            "desglose": calculate_skill_breakdown(propias, evaluado_email, now),
            "comparacion": compare_skills_by_period(propias, evaluado_email, now),
            "radar_comparativo": prepare_comparative_radar(propias, targets, now),
            "matriz_brecha": calculate_gap_matrix(propias),
        }

    def team_overview(
        self,
        records: Sequence[EvaluationRecord],
        usuario: Usuario,
        periodo: PeriodoType = PeriodoType.HISTORICO,
        targets: Sequence[TargetSkill] = (),
        now: Optional[datetime] = None
    ) -> dict:
        """
        Vista "Mi equipo" del líder.

        El equipo se resuelve por evaluaciones JEFE; los promedios de cada
        miembro usan todos sus registros (AUTO + JEFE).
        """
        equipo = filter_by_period(resolve_team_evaluations(records, usuario), periodo, now)
        miembros = {e.evaluado_email for e in equipo} - {usuario.email}
        registros_miembros = [e for e in records if e.evaluado_email in miembros]
        logger.info(f"Equipo de {usuario.email}: {len(miembros)} miembros")

        return {
            "evaluados": get_unique_evaluados(equipo),
            "resultados": summarize_by_person(registros_miembros),
            "progreso": calculate_level_progress(registros_miembros, targets, now=now),
            "hard_soft": calculate_hard_soft_stack(registros_miembros, now=now),
        }

    def organization_summary(
        self,
        records: Sequence[EvaluationRecord],
        periodo: PeriodoType = PeriodoType.HISTORICO,
        usuario: Optional[Usuario] = None,
        now: Optional[datetime] = None
    ) -> dict:
        """
        Vista de RRHH: resultados por persona, métricas agregadas y gráficos
        organizacionales. Las vistas de ventana móvil usan todos los registros
        visibles, sin el filtro de período.
        """
        visibles = filter_evaluations_by_role(records, usuario) if usuario else list(records)
        evals = filter_by_period(visibles, periodo, now)

        resultados = summarize_by_person(evals)
        bandas = seniority_by_email(resultados)
        tendencias = {
            banda.value: calculate_seniority_trend(visibles, bandas, banda.value, now)
            for banda in SeniorityBand
        }

        return {
            "resultados": resultados,
            "metricas": summarize_organization(resultados),
            "areas": get_unique_areas(evals),
            "puede_exportar": can_export(usuario.rol) if usuario else False,
            "tendencias_seniority": tendencias,
            "evolucion_seniority": group_by_month_and_seniority(evals, bandas),
            "evolucion_hard_soft": group_by_month_skill_type_and_seniority(evals, bandas),
            "matriz_brecha": calculate_gap_matrix(evals),
            "salto_nivel": calculate_level_jump(visibles, now=now),
            "top_cambios": calculate_top_skill_changes(visibles, now),
        }


def get_evaluaciones_service():
    """Helper para inyección de dependencias."""
    return EvaluacionesService()
