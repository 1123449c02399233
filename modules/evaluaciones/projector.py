# modules/evaluaciones/projector.py
"""
Proyección de resultados a las filas planas que consume la capa de gráficos.

Sin reglas numéricas nuevas: solo reagrupa, trunca etiquetas y ordena.
Las excepciones son el % de coincidencia de la matriz de brecha y los
resúmenes por persona, que reutilizan el compuesto amortiguado.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
import logging

from .aggregation import (
    CompositeSkillPoint,
    accumulate,
    group_by_person,
    group_by_skill,
    mean,
    person_composite_mean,
)
from .comparator import ComparacionPeriodos
from .constants import (
    ESCALA_MAX_BRECHA,
    MAX_ITEMS_DESTACADOS,
    MAX_LARGO_ETIQUETA,
    UMBRAL_CAMBIO_BRECHA,
    UMBRAL_FORTALEZA,
    UMBRAL_MEJORA_DESTACADA,
    UMBRAL_REQUIERE_ATENCION,
)
from .periods import month_key, month_label, quarter_key, quarter_label
from .schemas import (
    EvaluationRecord,
    ExpectedSkillTable,
    FormOrigin,
    SeniorityBand,
    SkillType,
)
from .seniority import classify

logger = logging.getLogger("EvaluacionesProyector")

ETIQUETA_CERRO = "Cerró"
ETIQUETA_ABRIO = "Abrió"
ETIQUETA_IGUAL = "Igual"


# =============================================================================
# DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class PuntoMatrizBrecha:
    mes: str
    promedio_general: float
    porcentaje_coincidencia: float
    gap_promedio: float


@dataclass(frozen=True)
class ResultadoPersona:
    """Fila de la tabla de resultados de RRHH / equipo."""
    email: str
    nombre: str
    area: str
    rol: str
    promedio_auto: float
    promedio_jefe: float
    promedio_final: float
    seniority_alcanzado: SeniorityBand
    gap: float


@dataclass
class MetricasOrganizacion:
    total: int = 0
    por_seniority: Dict[str, int] = field(default_factory=dict)
    gap_promedio: float = 0.0
    por_area: Dict[str, int] = field(default_factory=dict)


# =============================================================================
# RADAR / TENDENCIA
# =============================================================================

def project_radar(points: Sequence[CompositeSkillPoint]) -> List[dict]:
    return [
        {
            "skill": p.skill,
            "esperado": p.esperado,
            "auto": p.auto,
            "jefe": p.jefe,
            "promedio": p.promedio,
        }
        for p in points
    ]


def project_quarter_trend(
    records: Sequence[EvaluationRecord],
    tabla: ExpectedSkillTable,
    seniority: str,
    rol: str,
    area: str
) -> List[dict]:
    """
    Una fila por trimestre calendario con datos, en orden cronológico.

    `esperado` es la media de los valores esperados definidos (no cero) de
    las skills presentes en el trimestre; 0 si ninguna tiene expectativa.
    """
    por_trimestre: Dict[tuple, List[EvaluationRecord]] = {}
    for record in records:
        por_trimestre.setdefault(quarter_key(record.fecha), []).append(record)

    filas = []
    for key in sorted(por_trimestre):
        evals = por_trimestre[key]
        acumulador = accumulate(evals)
        esperados = [
            tabla.get(skill, seniority, rol, area)
            for skill in group_by_skill(evals)
        ]
        filas.append({
            "trimestre": quarter_label(key),
            "auto": acumulador.auto,
            "jefe": acumulador.jefe,
            "promedio": acumulador.promedio,
            "esperado": mean([e for e in esperados if e > 0]),
        })
    return filas


# =============================================================================
# COMPARACIÓN TRIMESTRAL
# =============================================================================

def _truncar(texto: str) -> str:
    if len(texto) > MAX_LARGO_ETIQUETA:
        return texto[:MAX_LARGO_ETIQUETA] + "..."
    return texto


def _union_skills(comparacion: ComparacionPeriodos) -> List[str]:
    """Skills del Q anterior y luego las nuevas del Q actual."""
    skills = [p.skill for p in comparacion.anterior]
    skills += [p.skill for p in comparacion.actual if p.skill not in skills]
    return skills


def project_comparison_bars(comparacion: ComparacionPeriodos) -> List[dict]:
    """Barras Q anterior vs Q actual, ordenadas por mejora descendente."""
    anteriores = {p.skill: p for p in comparacion.anterior}
    actuales = {p.skill: p for p in comparacion.actual}

    barras = []
    for skill in _union_skills(comparacion):
        anterior = anteriores.get(skill)
        actual = actuales.get(skill)
        q_anterior = anterior.promedio if anterior else 0.0
        q_actual = actual.promedio if actual else 0.0
        barras.append({
            "skill": _truncar(skill),
            "skill_completo": skill,
            "q_anterior": q_anterior,
            "q_actual": q_actual,
            "tipo": (anterior or actual).tipo,
            "mejora": q_actual - q_anterior,
        })

    barras.sort(key=lambda b: b["mejora"], reverse=True)
    return barras


def project_highlights(bars: Sequence[dict], tipo: SkillType) -> Dict[str, List[dict]]:
    """Mejoras destacadas (> 0.3) y skills que requieren atención (< -0.1)."""
    del_tipo = [b for b in bars if b["tipo"] == tipo]
    return {
        "destacadas": [b for b in del_tipo if b["mejora"] > UMBRAL_MEJORA_DESTACADA],
        "atencion": [b for b in del_tipo if b["mejora"] < UMBRAL_REQUIERE_ATENCION],
    }


def _etiqueta_brecha(gap_change: Optional[float]) -> Optional[str]:
    if gap_change is None:
        return None
    if gap_change < -UMBRAL_CAMBIO_BRECHA:
        return ETIQUETA_CERRO
    if gap_change > UMBRAL_CAMBIO_BRECHA:
        return ETIQUETA_ABRIO
    return ETIQUETA_IGUAL


def project_dumbbell(
    comparacion: ComparacionPeriodos,
    tabla: Optional[ExpectedSkillTable] = None,
    seniority: str = "",
    rol: str = "",
    area: str = ""
) -> List[dict]:
    """
    Brecha auto vs jefe por skill, Q anterior y Q actual.

    `gap_change` solo existe cuando la skill tiene datos en ambos trimestres.
    Orden: brecha actual descendente.
    """
    anteriores = {p.skill: p for p in comparacion.anterior}
    actuales = {p.skill: p for p in comparacion.actual}

    filas = []
    for skill in _union_skills(comparacion):
        anterior = anteriores.get(skill)
        actual = actuales.get(skill)
        auto_anterior = anterior.auto if anterior else 0.0
        jefe_anterior = anterior.jefe if anterior else 0.0
        auto_actual = actual.auto if actual else 0.0
        jefe_actual = actual.jefe if actual else 0.0

        gap_anterior = abs(auto_anterior - jefe_anterior)
        gap_actual = abs(auto_actual - jefe_actual)
        tiene_anterior = auto_anterior > 0 or jefe_anterior > 0
        tiene_actual = auto_actual > 0 or jefe_actual > 0
        gap_change = gap_actual - gap_anterior if tiene_anterior and tiene_actual else None

        filas.append({
            "skill": skill,
            "tipo": (anterior or actual).tipo,
            "auto_anterior": auto_anterior,
            "jefe_anterior": jefe_anterior,
            "auto_actual": auto_actual,
            "jefe_actual": jefe_actual,
            "esperado": tabla.get(skill, seniority, rol, area) if tabla else 0.0,
            "gap_anterior": gap_anterior,
            "gap_actual": gap_actual,
            "gap_change": gap_change,
            "tendencia_brecha": _etiqueta_brecha(gap_change),
        })

    filas.sort(key=lambda f: f["gap_actual"], reverse=True)
    return filas


def project_strengths(points: Sequence[CompositeSkillPoint]) -> Dict[str, List[dict]]:
    """
    Fortalezas (promedio - esperado >= 0.3) y áreas de mejora (< 0).

    Una skill presente en varios radares se promedia. Los valores se
    redondean a 2 decimales antes de comparar, igual que la tarjeta.
    """
    agrupadas: Dict[str, dict] = {}
    for point in points:
        grupo = agrupadas.setdefault(point.skill, {"promedios": [], "esperado": point.esperado})
        grupo["promedios"].append(point.promedio)

    resultados = []
    for skill, grupo in agrupadas.items():
        promedio = mean(grupo["promedios"])
        resultados.append({
            "skill": skill,
            "promedio": round(promedio, 2),
            "esperado": grupo["esperado"],
            "diferencia": round(promedio - grupo["esperado"], 2),
        })

    fortalezas = sorted(
        (r for r in resultados if r["diferencia"] >= UMBRAL_FORTALEZA),
        key=lambda r: r["diferencia"], reverse=True,
    )
    mejoras = sorted(
        (r for r in resultados if r["diferencia"] < 0),
        key=lambda r: r["diferencia"],
    )
    return {
        "fortalezas": fortalezas[:MAX_ITEMS_DESTACADOS],
        "mejoras": mejoras[:MAX_ITEMS_DESTACADOS],
    }


# =============================================================================
# SERIES MENSUALES POR SENIORITY
# =============================================================================

def _por_mes(
    records: Iterable[EvaluationRecord],
    seniority_por_email: Mapping[str, str]
) -> Dict[tuple, List[EvaluationRecord]]:
    # Personas sin seniority asignado no participan
    meses: Dict[tuple, List[EvaluationRecord]] = {}
    for record in records:
        if record.evaluado_email not in seniority_por_email:
            continue
        meses.setdefault(month_key(record.fecha), []).append(record)
    return meses


def group_by_month_and_seniority(
    records: Sequence[EvaluationRecord],
    seniority_por_email: Mapping[str, str]
) -> List[dict]:
    """
    Serie mensual con el promedio de personas por banda.
    Banda sin personas con datos en el mes -> None (corte de línea).
    """
    filas = []
    meses = _por_mes(records, seniority_por_email)
    for key in sorted(meses):
        fila = {"mes": month_label(key)}
        for banda in SeniorityBand:
            de_la_banda = [e for e in meses[key] if seniority_por_email[e.evaluado_email] == banda.value]
            fila[banda.value] = person_composite_mean(de_la_banda)
        filas.append(fila)
    return filas


def group_by_month_skill_type_and_seniority(
    records: Sequence[EvaluationRecord],
    seniority_por_email: Mapping[str, str]
) -> List[dict]:
    """Como la serie por banda, separando HARD/SOFT. Sin datos -> 0 (área apilada)."""
    filas = []
    meses = _por_mes(records, seniority_por_email)
    for key in sorted(meses):
        fila = {"mes": month_label(key)}
        for banda in SeniorityBand:
            for tipo, sufijo in ((SkillType.HARD, "Hard"), (SkillType.SOFT, "Soft")):
                subset = [
                    e for e in meses[key]
                    if seniority_por_email[e.evaluado_email] == banda.value and e.skill_tipo == tipo
                ]
                fila[f"{banda.value}_{sufijo}"] = person_composite_mean(subset) or 0.0
        filas.append(fila)
    return filas


# =============================================================================
# BRECHA AUTO VS JEFE
# =============================================================================

def calculate_gap_matrix(
    records: Sequence[EvaluationRecord],
    email: Optional[str] = None
) -> List[PuntoMatrizBrecha]:
    """
    Evolución mensual de la brecha auto vs jefe.

    Coincidencia = max(0, 100 - gap / 5 * 100) solo cuando ambos lados
    tienen datos; si falta uno la coincidencia es 0.
    """
    evals = [e for e in records if e.evaluado_email == email] if email else list(records)

    por_mes: Dict[tuple, List[EvaluationRecord]] = {}
    for record in evals:
        por_mes.setdefault(month_key(record.fecha), []).append(record)

    puntos = []
    for key in sorted(por_mes):
        acumulador = accumulate(por_mes[key])
        gap = abs(acumulador.jefe - acumulador.auto)
        coincidencia = 0.0
        if acumulador.auto > 0 and acumulador.jefe > 0:
            coincidencia = max(0.0, 100 - gap / ESCALA_MAX_BRECHA * 100)
        puntos.append(PuntoMatrizBrecha(
            mes=month_label(key),
            promedio_general=acumulador.promedio,
            porcentaje_coincidencia=coincidencia,
            gap_promedio=gap,
        ))
    return puntos


# =============================================================================
# RESÚMENES POR PERSONA
# =============================================================================

def _rol_desde_origen(origen: FormOrigin) -> str:
    return "Analista" if origen == FormOrigin.ANALISTA else "Líder"


def summarize_by_person(records: Sequence[EvaluationRecord]) -> List[ResultadoPersona]:
    """Una fila por evaluado, en orden de primera aparición."""
    resultados = []
    for email, evals in group_by_person(records).items():
        acumulador = accumulate(evals)
        primero = evals[0]
        resultados.append(ResultadoPersona(
            email=email,
            nombre=primero.nombre_completo,
            area=primero.area,
            rol=_rol_desde_origen(primero.origen),
            promedio_auto=acumulador.auto,
            promedio_jefe=acumulador.jefe,
            promedio_final=acumulador.promedio,
            seniority_alcanzado=classify(acumulador.promedio),
            gap=abs(acumulador.auto - acumulador.jefe),
        ))
    logger.debug(f"Resumen por persona: {len(resultados)} evaluados")
    return resultados


def summarize_organization(resultados: Sequence[ResultadoPersona]) -> MetricasOrganizacion:
    """Conteos por banda y área más la brecha promedio."""
    metricas = MetricasOrganizacion(
        total=len(resultados),
        por_seniority={banda.value: 0 for banda in SeniorityBand},
        gap_promedio=mean([r.gap for r in resultados]),
    )
    for resultado in resultados:
        metricas.por_seniority[resultado.seniority_alcanzado.value] += 1
        metricas.por_area[resultado.area] = metricas.por_area.get(resultado.area, 0) + 1
    return metricas


def seniority_by_email(resultados: Iterable[ResultadoPersona]) -> Dict[str, str]:
    """Mapa email -> banda alcanzada, insumo de las series por seniority."""
    return {r.email: r.seniority_alcanzado.value for r in resultados}
