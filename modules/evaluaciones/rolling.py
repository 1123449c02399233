# modules/evaluaciones/rolling.py
"""
Comparaciones con ventana móvil (gráficos organizacionales).

Q2 = últimos 3 meses desde hoy, Q1 = los 3 meses previos (meses -6 a -3).
Las ventanas se calculan una vez por llamada contra `now`. Todas las
variantes usan el compuesto amortiguado min((auto + jefe) / 2, jefe).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence
import logging

from dateutil.relativedelta import relativedelta

from .aggregation import (
    Acumulador,
    composite_of,
    group_by_person,
    group_by_skill,
    mean,
    person_composite_mean,
)
from .constants import (
    MAX_ITEMS_DESTACADOS,
    TARGET_DEFAULT,
    TARGET_SCORE_HARD_SOFT,
    UMBRAL_CAMBIO_SIGNIFICATIVO,
)
from .periods import filter_in_range, get_month_range, get_rolling_windows, resolve_now
from .schemas import EvaluationRecord, FormOrigin, SeniorityBand, SkillType, TargetSkill
from .seniority import classify

logger = logging.getLogger("EvaluacionesVentanaMovil")

PERSONA_DEFAULT = "Usuario"


# =============================================================================
# DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class BandaSeniorityPersona:
    """Fila del gráfico de bandas ("kite/comet")."""
    persona: str
    q1_score: float
    q2_score: float
    q1_seniority: SeniorityBand
    q2_seniority: SeniorityBand
    cambio: float
    salto_nivel: bool


@dataclass(frozen=True)
class ProgresoNivelPersona:
    persona: str
    q1: float
    q2: float
    nivel_esperado: float
    cambio: float


@dataclass(frozen=True)
class HardSoftPersona:
    persona: str
    hard: float
    soft: float
    total: float
    nivel_esperado: float


@dataclass(frozen=True)
class CambioSkill:
    skill: str
    tipo: SkillType
    cambio: float
    actual: float
    anterior: float


@dataclass
class TopCambios:
    mejoras: List[CambioSkill] = field(default_factory=list)
    empeoramientos: List[CambioSkill] = field(default_factory=list)


@dataclass(frozen=True)
class EvolucionSkill:
    skill: str
    tipo: SkillType
    anterior: float
    actual: float
    target: float
    cambio: float


@dataclass(frozen=True)
class DesgloseSkill:
    skill: str
    q1: float
    q2: float
    cambio: float
    estado: SeniorityBand


@dataclass
class DesgloseSkills:
    hard_skills: List[DesgloseSkill] = field(default_factory=list)
    soft_skills: List[DesgloseSkill] = field(default_factory=list)
    mayor_brecha: Optional[str] = None
    promedio_hard: float = 0.0
    promedio_soft: float = 0.0


@dataclass(frozen=True)
class ComparacionSkill:
    skill: str
    skill_tipo: SkillType
    score_a: float
    score_b: float
    cambio: float


@dataclass(frozen=True)
class ValorSkill:
    skill: str
    value: float


@dataclass
class RadarComparativo:
    actual: List[ValorSkill] = field(default_factory=list)
    anterior: List[ValorSkill] = field(default_factory=list)
    target: List[ValorSkill] = field(default_factory=list)


@dataclass(frozen=True)
class TendenciaSeniority:
    cambio_absoluto: float
    cambio_porcentual: float
    direccion: str  # "up", "down", "stable"


# =============================================================================
# HELPERS
# =============================================================================

def _filtrar(
    records: Sequence[EvaluationRecord],
    email: Optional[str] = None,
    origen: Optional[FormOrigin] = None
) -> List[EvaluationRecord]:
    evals = list(records)
    if email:
        evals = [e for e in evals if e.evaluado_email == email]
    if origen:
        evals = [e for e in evals if e.origen == origen]
    return evals


def _nombre_persona(evals: Sequence[EvaluationRecord], email: Optional[str]) -> str:
    if evals:
        return evals[0].evaluado_nombre
    return email or PERSONA_DEFAULT


def _target_map(targets: Sequence[TargetSkill]) -> Dict[str, float]:
    mapa: Dict[str, float] = {}
    for target in targets:
        mapa.setdefault(target.skill, target.valor_esperado)
    return mapa


def _target_de(mapa: Mapping[str, float], skill: str) -> float:
    # 0 o ausente -> target por defecto
    return mapa.get(skill) or TARGET_DEFAULT


def _nivel_esperado(targets: Sequence[TargetSkill]) -> float:
    if not targets:
        return float(TARGET_DEFAULT)
    return mean([t.valor_esperado for t in targets])


def _promedios_por_skill(records: Sequence[EvaluationRecord]) -> Dict[str, Acumulador]:
    """Acumuladores por skill; solo skills con datos (compuesto > 0)."""
    return {
        skill: acumulador
        for skill, acumulador in group_by_skill(records).items()
        if acumulador.promedio > 0
    }


def _ventanas(
    evals: Sequence[EvaluationRecord],
    now: Optional[datetime],
    alinear_a_mes: bool = False
):
    anterior, actual = get_rolling_windows(now, alinear_a_mes=alinear_a_mes)
    evals_anterior = filter_in_range(evals, anterior)
    evals_actual = filter_in_range(evals, actual)
    logger.debug(
        f"Ventana móvil desde {actual.inicio:%Y-%m-%d %H:%M}: "
        f"{len(evals_anterior)} registros anterior, {len(evals_actual)} actual"
    )
    return evals_anterior, evals_actual


# =============================================================================
# SALTO DE NIVEL / BANDAS DE SENIORITY
# =============================================================================

def calculate_level_jump(
    records: Sequence[EvaluationRecord],
    email: Optional[str] = None,
    origen: Optional[FormOrigin] = None,
    now: Optional[datetime] = None
) -> List[BandaSeniorityPersona]:
    """
    Bandas de seniority Q1 vs Q2 por persona.

    `salto_nivel` es True cuando la banda clasificada cambia entre ventanas.
    Sin `email` se devuelve una fila por cada persona presente en los datos.
    """
    evals = _filtrar(records, email, origen)
    evals_q1, evals_q2 = _ventanas(evals, now)

    def _fila(persona: str, q1: float, q2: float) -> BandaSeniorityPersona:
        q1_seniority = classify(q1)
        q2_seniority = classify(q2)
        return BandaSeniorityPersona(
            persona=persona,
            q1_score=q1,
            q2_score=q2,
            q1_seniority=q1_seniority,
            q2_seniority=q2_seniority,
            cambio=q2 - q1,
            salto_nivel=q1_seniority != q2_seniority,
        )

    if email:
        return [_fila(
            _nombre_persona(evals, email),
            composite_of(evals_q1),
            composite_of(evals_q2),
        )]

    filas = []
    for persona_email, persona_evals in group_by_person(evals).items():
        q1 = composite_of(e for e in evals_q1 if e.evaluado_email == persona_email)
        q2 = composite_of(e for e in evals_q2 if e.evaluado_email == persona_email)
        filas.append(_fila(persona_evals[0].evaluado_nombre, q1, q2))
    return filas


def calculate_level_progress(
    records: Sequence[EvaluationRecord],
    targets: Sequence[TargetSkill] = (),
    email: Optional[str] = None,
    origen: Optional[FormOrigin] = None,
    now: Optional[datetime] = None
) -> List[ProgresoNivelPersona]:
    """Barras agrupadas Q1 vs Q2 con línea de nivel esperado."""
    evals = _filtrar(records, email, origen)
    evals_q1, evals_q2 = _ventanas(evals, now)
    nivel_esperado = _nivel_esperado(targets)

    if email:
        q1 = composite_of(evals_q1)
        q2 = composite_of(evals_q2)
        return [ProgresoNivelPersona(
            persona=_nombre_persona(evals, email),
            q1=q1, q2=q2, nivel_esperado=nivel_esperado, cambio=q2 - q1,
        )]

    filas = []
    for persona_email, persona_evals in group_by_person(evals).items():
        q1 = composite_of(e for e in evals_q1 if e.evaluado_email == persona_email)
        q2 = composite_of(e for e in evals_q2 if e.evaluado_email == persona_email)
        filas.append(ProgresoNivelPersona(
            persona=persona_evals[0].evaluado_nombre,
            q1=q1, q2=q2, nivel_esperado=nivel_esperado, cambio=q2 - q1,
        ))
    return filas


def calculate_hard_soft_stack(
    records: Sequence[EvaluationRecord],
    target_score: float = TARGET_SCORE_HARD_SOFT,
    email: Optional[str] = None,
    origen: Optional[FormOrigin] = None,
    now: Optional[datetime] = None
) -> List[HardSoftPersona]:
    """Composición hard/soft por persona, solo últimos 3 meses."""
    evals = _filtrar(records, email, origen)
    _, actual = get_rolling_windows(now)
    evals = filter_in_range(evals, actual)

    def _fila(persona: str, subset: Sequence[EvaluationRecord]) -> HardSoftPersona:
        hard = composite_of(e for e in subset if e.skill_tipo == SkillType.HARD)
        soft = composite_of(e for e in subset if e.skill_tipo == SkillType.SOFT)
        return HardSoftPersona(
            persona=persona, hard=hard, soft=soft,
            total=(hard + soft) / 2, nivel_esperado=target_score,
        )

    if email:
        return [_fila(_nombre_persona(evals, email), evals)]

    return [
        _fila(persona_evals[0].evaluado_nombre, persona_evals)
        for persona_evals in group_by_person(evals).values()
    ]


# =============================================================================
# CAMBIOS POR SKILL
# =============================================================================

def calculate_top_skill_changes(
    records: Sequence[EvaluationRecord],
    now: Optional[datetime] = None
) -> TopCambios:
    """
    Top 5 skills que más mejoraron / empeoraron (ventanas alineadas a mes).
    Solo skills presentes en ambas ventanas y con |cambio| > 0.05.
    """
    evals_anterior, evals_actual = _ventanas(records, now, alinear_a_mes=True)
    actuales = _promedios_por_skill(evals_actual)
    anteriores = _promedios_por_skill(evals_anterior)

    cambios = []
    for skill, actual in actuales.items():
        anterior = anteriores.get(skill)
        if anterior is None:
            continue
        cambio = actual.promedio - anterior.promedio
        if abs(cambio) > UMBRAL_CAMBIO_SIGNIFICATIVO:
            cambios.append(CambioSkill(
                skill=skill, tipo=actual.tipo, cambio=cambio,
                actual=actual.promedio, anterior=anterior.promedio,
            ))

    cambios.sort(key=lambda c: abs(c.cambio), reverse=True)
    return TopCambios(
        mejoras=[c for c in cambios if c.cambio > 0][:MAX_ITEMS_DESTACADOS],
        empeoramientos=[c for c in cambios if c.cambio < 0][:MAX_ITEMS_DESTACADOS],
    )


def calculate_skill_evolution(
    records: Sequence[EvaluationRecord],
    targets: Sequence[TargetSkill] = (),
    email: Optional[str] = None,
    origen: Optional[FormOrigin] = None,
    now: Optional[datetime] = None
) -> List[EvolucionSkill]:
    """
    Gráfico lollipop: cada skill entre ventana anterior y actual
    (alineadas a mes). HARD primero, luego por |cambio| descendente.
    """
    evals = _filtrar(records, email, origen)
    evals_anterior, evals_actual = _ventanas(evals, now, alinear_a_mes=True)
    actuales = _promedios_por_skill(evals_actual)
    anteriores = _promedios_por_skill(evals_anterior)
    targets_map = _target_map(targets)

    resultado = []
    for skill in list(actuales) + [s for s in anteriores if s not in actuales]:
        dato_actual = actuales.get(skill)
        dato_anterior = anteriores.get(skill)
        actual = dato_actual.promedio if dato_actual else 0.0
        anterior = dato_anterior.promedio if dato_anterior else 0.0
        tipo = (dato_actual or dato_anterior).tipo

        resultado.append(EvolucionSkill(
            skill=skill,
            tipo=tipo,
            anterior=anterior,
            actual=actual,
            target=_target_de(targets_map, skill),
            cambio=actual - anterior,
        ))

    resultado.sort(key=lambda r: (r.tipo != SkillType.HARD, -abs(r.cambio)))
    return resultado


def calculate_skill_breakdown(
    records: Sequence[EvaluationRecord],
    email: str,
    now: Optional[datetime] = None
) -> DesgloseSkills:
    """Drill-down de una persona: skills hard/soft con Q1, Q2 y banda en Q2."""
    evals = _filtrar(records, email)
    evals_q1, evals_q2 = _ventanas(evals, now)
    grupos_q1 = group_by_skill(evals_q1)
    grupos_q2 = group_by_skill(evals_q2)

    desglose = DesgloseSkills()
    todas: List[DesgloseSkill] = []
    for skill, acumulador in group_by_skill(evals).items():
        q1 = grupos_q1[skill].promedio if skill in grupos_q1 else 0.0
        q2 = grupos_q2[skill].promedio if skill in grupos_q2 else 0.0
        fila = DesgloseSkill(skill=skill, q1=q1, q2=q2, cambio=q2 - q1, estado=classify(q2))
        todas.append(fila)
        if acumulador.tipo == SkillType.HARD:
            desglose.hard_skills.append(fila)
        else:
            desglose.soft_skills.append(fila)

    if todas:
        desglose.mayor_brecha = min(todas, key=lambda s: s.q2).skill
    desglose.promedio_hard = mean([s.q2 for s in desglose.hard_skills])
    desglose.promedio_soft = mean([s.q2 for s in desglose.soft_skills])
    desglose.hard_skills.sort(key=lambda s: s.q2, reverse=True)
    desglose.soft_skills.sort(key=lambda s: s.q2, reverse=True)
    return desglose


def compare_skills_by_period(
    records: Sequence[EvaluationRecord],
    email: str,
    now: Optional[datetime] = None
) -> List[ComparacionSkill]:
    """
    Período B = últimos 3 meses; período A = todo lo anterior a eso
    (admite evaluaciones semestrales o anuales). Orden por |cambio| desc.
    """
    evals = _filtrar(records, email)
    if not evals:
        return []

    _, ventana_b = get_rolling_windows(now)
    evals_b = filter_in_range(evals, ventana_b)
    evals_a = [e for e in evals if e.fecha < ventana_b.inicio]

    grupos_a = group_by_skill(evals_a)
    grupos_b = group_by_skill(evals_b)

    resultados = []
    for skill, acumulador in group_by_skill(evals).items():
        score_a = grupos_a[skill].promedio if skill in grupos_a else 0.0
        score_b = grupos_b[skill].promedio if skill in grupos_b else 0.0
        resultados.append(ComparacionSkill(
            skill=skill, skill_tipo=acumulador.tipo,
            score_a=score_a, score_b=score_b, cambio=score_b - score_a,
        ))

    resultados.sort(key=lambda r: abs(r.cambio), reverse=True)
    return resultados


def prepare_comparative_radar(
    records: Sequence[EvaluationRecord],
    targets: Sequence[TargetSkill] = (),
    now: Optional[datetime] = None
) -> RadarComparativo:
    """Radar antes/después (ventanas alineadas a mes) más la serie target."""
    evals_anterior, evals_actual = _ventanas(records, now, alinear_a_mes=True)
    actuales = _promedios_por_skill(evals_actual)
    anteriores = _promedios_por_skill(evals_anterior)
    targets_map = _target_map(targets)

    skills = list(actuales) + [s for s in anteriores if s not in actuales]
    return RadarComparativo(
        actual=[ValorSkill(skill=s, value=p.promedio) for s, p in actuales.items()],
        anterior=[ValorSkill(skill=s, value=p.promedio) for s, p in anteriores.items()],
        target=[ValorSkill(skill=s, value=_target_de(targets_map, s)) for s in skills],
    )


# =============================================================================
# TENDENCIA MENSUAL POR SENIORITY
# =============================================================================

def calculate_seniority_trend(
    records: Sequence[EvaluationRecord],
    seniority_por_email: Mapping[str, str],
    seniority: str,
    now: Optional[datetime] = None
) -> TendenciaSeniority:
    """Último mes calendario vs el mes anterior para una banda de seniority."""
    now = resolve_now(now)
    previo = now - relativedelta(months=1)
    mes_actual = get_month_range(now.year, now.month)
    mes_anterior = get_month_range(previo.year, previo.month)

    de_la_banda = [e for e in records if seniority_por_email.get(e.evaluado_email) == seniority]
    promedio_ultimo = person_composite_mean(filter_in_range(de_la_banda, mes_actual))
    promedio_penultimo = person_composite_mean(filter_in_range(de_la_banda, mes_anterior))

    if promedio_ultimo is None or promedio_penultimo is None:
        return TendenciaSeniority(cambio_absoluto=0.0, cambio_porcentual=0.0, direccion="stable")

    cambio = promedio_ultimo - promedio_penultimo
    direccion = "stable"
    if cambio > UMBRAL_CAMBIO_SIGNIFICATIVO:
        direccion = "up"
    elif cambio < -UMBRAL_CAMBIO_SIGNIFICATIVO:
        direccion = "down"

    return TendenciaSeniority(
        cambio_absoluto=cambio,
        cambio_porcentual=cambio / promedio_penultimo * 100,
        direccion=direccion,
    )
