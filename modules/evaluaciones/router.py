"""
Router del Módulo Evaluaciones.

API JSON sin persistencia: cada request trae los registros de la planilla
y devuelve los datos ya agregados para la capa de gráficos.
"""

from fastapi import APIRouter, Depends, HTTPException
import logging

from .service import EvaluacionesService, get_evaluaciones_service
from .schemas import (
    ComparacionRequest,
    EquipoRequest,
    EvolucionRequest,
    RadarRequest,
    ResumenRequest,
    SaltoNivelRequest,
    UserRole,
)

logger = logging.getLogger("EvaluacionesRouter")

router = APIRouter(
    prefix="/evaluaciones",
    tags=["Módulo Evaluaciones"],
)


@router.get("/periodos")
async def get_periodos(service: EvaluacionesService = Depends(get_evaluaciones_service)):
    """Tokens de período con sus etiquetas para el filtro de la UI."""
    return service.get_periodos()


@router.post("/radar")
async def post_radar(
    payload: RadarRequest,
    service: EvaluacionesService = Depends(get_evaluaciones_service)
):
    """Tablero individual: radares, promedio general, seniority y estado."""
    return service.build_radar(
        payload.evaluations,
        payload.skills_matrix,
        payload.seniority_esperado,
        payload.rol,
        area=payload.area,
        periodo=payload.periodo,
        evaluado_email=payload.evaluado_email,
        now=payload.fecha_referencia,
    )


@router.post("/comparacion")
async def post_comparacion(
    payload: ComparacionRequest,
    service: EvaluacionesService = Depends(get_evaluaciones_service)
):
    """Q anterior vs Q actual (trimestres calendario)."""
    return service.compare_quarters(
        payload.evaluations,
        evaluado_email=payload.evaluado_email,
        skills_matrix=payload.skills_matrix,
        seniority_esperado=payload.seniority_esperado,
        rol=payload.rol,
        area=payload.area,
        now=payload.fecha_referencia,
    )


@router.post("/salto-nivel")
async def post_salto_nivel(
    payload: SaltoNivelRequest,
    service: EvaluacionesService = Depends(get_evaluaciones_service)
):
    """Bandas de seniority con ventana móvil de 3 meses."""
    return service.level_jump(
        payload.evaluations,
        evaluado_email=payload.evaluado_email,
        origen=payload.origen,
        now=payload.fecha_referencia,
    )


@router.post("/evolucion")
async def post_evolucion(
    payload: EvolucionRequest,
    service: EvaluacionesService = Depends(get_evaluaciones_service)
):
    """Evolución por skill de una persona (ventanas móviles)."""
    return service.person_evolution(
        payload.evaluations,
        payload.evaluado_email,
        targets=payload.targets,
        now=payload.fecha_referencia,
    )


@router.post("/equipo")
async def post_equipo(
    payload: EquipoRequest,
    service: EvaluacionesService = Depends(get_evaluaciones_service)
):
    """Vista "Mi equipo". Los analistas no tienen equipo a cargo."""
    if payload.usuario.rol == UserRole.ANALISTA:
        logger.warning(f"Acceso denegado a vista de equipo: {payload.usuario.email}")
        raise HTTPException(status_code=403, detail="Acceso denegado. Solo líderes, RRHH o Dirección.")

    return service.team_overview(
        payload.evaluations,
        payload.usuario,
        periodo=payload.periodo,
        targets=payload.targets,
        now=payload.fecha_referencia,
    )


@router.post("/resumen")
async def post_resumen(
    payload: ResumenRequest,
    service: EvaluacionesService = Depends(get_evaluaciones_service)
):
    """Vista de RRHH: resultados por persona y métricas de la organización."""
    return service.organization_summary(
        payload.evaluations,
        periodo=payload.periodo,
        usuario=payload.usuario,
        now=payload.fecha_referencia,
    )
