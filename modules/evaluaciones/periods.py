# modules/evaluaciones/periods.py
"""
Resolución de períodos para el dashboard de evaluaciones.

Traduce los tokens de período del filtro de UI a rangos de fechas concretos
y clasifica fechas en ventanas "anterior" / "actual".

Conviven dos esquemas de comparación que NO son intercambiables:
- Trimestre calendario (Q anterior vs Q actual): comparación oficial por persona.
- Ventana móvil de 3 meses desde hoy: gráficos de salto de nivel, bandas,
  hard/soft y evolución por skill.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple, TypeVar, Union
from zoneinfo import ZoneInfo
import logging

from dateutil.relativedelta import relativedelta

from core.config import settings
from .constants import MESES_VENTANA_MOVIL, NOMBRES_MESES

logger = logging.getLogger("EvaluacionesPeriodos")

T = TypeVar("T")


class PeriodoType(str, Enum):
    """Tokens de período: contrato público con el filtro de la UI."""
    HISTORICO = "HISTORICO"
    ESTE_ANO = "ESTE_ANO"
    Q_ACTUAL = "Q_ACTUAL"
    Q_ANTERIOR = "Q_ANTERIOR"
    ULTIMOS_2Q = "ULTIMOS_2Q"
    ULTIMOS_3Q = "ULTIMOS_3Q"
    PRIMER_SEMESTRE = "PRIMER_SEMESTRE"
    SEGUNDO_SEMESTRE = "SEGUNDO_SEMESTRE"
    ULTIMOS_6_MESES = "ULTIMOS_6_MESES"
    ULTIMOS_3_MESES = "ULTIMOS_3_MESES"


PERIODOS = [
    {"value": PeriodoType.HISTORICO.value, "label": "Histórico (Todo)"},
    {"value": PeriodoType.ESTE_ANO.value, "label": "Este Año"},
    {"value": PeriodoType.Q_ACTUAL.value, "label": "Q Actual"},
    {"value": PeriodoType.Q_ANTERIOR.value, "label": "Q Anterior"},
    {"value": PeriodoType.ULTIMOS_2Q.value, "label": "Últimos 2 Trimestres"},
    {"value": PeriodoType.ULTIMOS_3Q.value, "label": "Últimos 3 Trimestres"},
    {"value": PeriodoType.PRIMER_SEMESTRE.value, "label": "Primer Semestre (Ene-Jun)"},
    {"value": PeriodoType.SEGUNDO_SEMESTRE.value, "label": "Segundo Semestre (Jul-Dic)"},
    {"value": PeriodoType.ULTIMOS_6_MESES.value, "label": "Últimos 6 Meses"},
    {"value": PeriodoType.ULTIMOS_3_MESES.value, "label": "Últimos 3 Meses"},
]

BUCKET_ANTERIOR = "anterior"
BUCKET_ACTUAL = "actual"


@dataclass(frozen=True)
class RangoFechas:
    """Rango inclusivo en ambos extremos. None = sin límite."""
    inicio: Optional[datetime]
    fin: Optional[datetime]

    def contains(self, fecha: datetime) -> bool:
        if self.inicio is not None and fecha < self.inicio:
            return False
        if self.fin is not None and fecha > self.fin:
            return False
        return True


# =============================================================================
# HELPERS
# =============================================================================

def now_local() -> datetime:
    """Hora actual en la zona configurada, sin tzinfo (igual que las fechas de registros)."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def resolve_now(now: Optional[datetime]) -> datetime:
    return now if now is not None else now_local()


def _inicio_de_mes(year: int, month: int) -> datetime:
    return datetime(year, month, 1)


def fin_de_mes(year: int, month: int) -> datetime:
    """Último día calendario del mes a las 23:59:59."""
    ultimo = _inicio_de_mes(year, month) + relativedelta(months=1) - relativedelta(days=1)
    return ultimo.replace(hour=23, minute=59, second=59)


def restar_meses(fecha: datetime, meses: int) -> datetime:
    """
    Retrocede `meses` conservando día y hora.

    Si el día no existe en el mes destino, el excedente pasa al mes
    siguiente: 31/05/2024 - 3 meses = 02/03/2024 (febrero tiene 29 días).
    """
    primero = fecha.replace(day=1) - relativedelta(months=meses)
    return primero + timedelta(days=fecha.day - 1)


def get_quarter(fecha: Union[date, datetime]) -> int:
    """Q1: Ene-Mar, Q2: Abr-Jun, Q3: Jul-Sep, Q4: Oct-Dic."""
    return (fecha.month - 1) // 3 + 1


def get_month_range(year: int, month: int) -> RangoFechas:
    return RangoFechas(inicio=_inicio_de_mes(year, month), fin=fin_de_mes(year, month))


def get_quarter_range(year: int, quarter: int) -> RangoFechas:
    start_month = (quarter - 1) * 3 + 1
    return RangoFechas(
        inicio=_inicio_de_mes(year, start_month),
        fin=fin_de_mes(year, start_month + 2),
    )


# =============================================================================
# RANGOS NOMBRADOS
# =============================================================================

def get_previous_quarter(now: Optional[datetime] = None) -> Tuple[int, int]:
    """(año, trimestre) anterior al actual. Q1 retrocede a Q4 del año previo."""
    now = resolve_now(now)
    current_quarter = get_quarter(now)
    if current_quarter == 1:
        return now.year - 1, 4
    return now.year, current_quarter - 1


def get_previous_quarter_range(now: Optional[datetime] = None) -> RangoFechas:
    year, quarter = get_previous_quarter(now)
    return get_quarter_range(year, quarter)


def get_current_quarter_range(now: Optional[datetime] = None) -> RangoFechas:
    now = resolve_now(now)
    return get_quarter_range(now.year, get_quarter(now))


def get_last_n_quarters_range(n: int, now: Optional[datetime] = None) -> RangoFechas:
    """Desde el primer día del trimestre n-1 veces anterior hasta el fin del trimestre actual."""
    now = resolve_now(now)
    current_quarter = get_quarter(now)

    # Aritmética en "trimestres absolutos" para cruzar años
    start_index = now.year * 4 + (current_quarter - 1) - (n - 1)
    start_year, start_q0 = divmod(start_index, 4)

    inicio = get_quarter_range(start_year, start_q0 + 1).inicio
    fin = get_quarter_range(now.year, current_quarter).fin
    return RangoFechas(inicio=inicio, fin=fin)


def get_current_year_range(now: Optional[datetime] = None) -> RangoFechas:
    now = resolve_now(now)
    return RangoFechas(inicio=datetime(now.year, 1, 1), fin=fin_de_mes(now.year, 12))


def get_first_semester_range(now: Optional[datetime] = None) -> RangoFechas:
    now = resolve_now(now)
    return RangoFechas(inicio=datetime(now.year, 1, 1), fin=fin_de_mes(now.year, 6))


def get_second_semester_range(now: Optional[datetime] = None) -> RangoFechas:
    now = resolve_now(now)
    return RangoFechas(inicio=datetime(now.year, 7, 1), fin=fin_de_mes(now.year, 12))


def get_last_n_months_range(n: int, now: Optional[datetime] = None) -> RangoFechas:
    """Desde el día 1 del mes n meses atrás hasta el último día del mes actual."""
    now = resolve_now(now)
    inicio = restar_meses(now, n).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return RangoFechas(inicio=inicio, fin=fin_de_mes(now.year, now.month))


def get_period_range(periodo: PeriodoType, now: Optional[datetime] = None) -> Optional[RangoFechas]:
    """Rango concreto de un token. HISTORICO no tiene rango (None)."""
    resolvers = {
        PeriodoType.ESTE_ANO: lambda: get_current_year_range(now),
        PeriodoType.Q_ACTUAL: lambda: get_current_quarter_range(now),
        PeriodoType.Q_ANTERIOR: lambda: get_previous_quarter_range(now),
        PeriodoType.ULTIMOS_2Q: lambda: get_last_n_quarters_range(2, now),
        PeriodoType.ULTIMOS_3Q: lambda: get_last_n_quarters_range(3, now),
        PeriodoType.PRIMER_SEMESTRE: lambda: get_first_semester_range(now),
        PeriodoType.SEGUNDO_SEMESTRE: lambda: get_second_semester_range(now),
        PeriodoType.ULTIMOS_6_MESES: lambda: get_last_n_months_range(6, now),
        PeriodoType.ULTIMOS_3_MESES: lambda: get_last_n_months_range(3, now),
    }
    resolver = resolvers.get(periodo)
    return resolver() if resolver else None


# =============================================================================
# FILTRADO
# =============================================================================

def filter_by_period(
    items: List[T],
    periodo: Union[PeriodoType, str],
    now: Optional[datetime] = None
) -> List[T]:
    """
    Filtra registros (con atributo `fecha`) por token de período.

    HISTORICO devuelve la misma lista recibida. Un token desconocido
    también la devuelve sin filtrar.
    """
    try:
        periodo = PeriodoType(periodo)
    except ValueError:
        logger.warning(f"Período desconocido '{periodo}', se devuelve sin filtrar")
        return items

    rango = get_period_range(periodo, now)
    if rango is None:
        return items

    return [item for item in items if rango.contains(item.fecha)]


def filter_by_date_range(items: List[T], inicio: date, fin: date) -> List[T]:
    """Rango personalizado del filtro: `fin` incluye el día completo."""
    rango = RangoFechas(
        inicio=datetime(inicio.year, inicio.month, inicio.day),
        fin=datetime(fin.year, fin.month, fin.day, 23, 59, 59, 999999),
    )
    return [item for item in items if rango.contains(item.fecha)]


def filter_in_range(items: Iterable[T], rango: RangoFechas) -> List[T]:
    return [item for item in items if rango.contains(item.fecha)]


# =============================================================================
# VENTANAS DE COMPARACIÓN
# =============================================================================

def get_quarter_comparison_windows(now: Optional[datetime] = None) -> Tuple[RangoFechas, RangoFechas]:
    """(Q anterior, Q actual) alineados a trimestre calendario."""
    now = resolve_now(now)
    return get_previous_quarter_range(now), get_current_quarter_range(now)


def classify_bucket(fecha: datetime, now: Optional[datetime] = None) -> Optional[str]:
    """Ubica una fecha en el Q anterior, el Q actual o en ninguno."""
    anterior, actual = get_quarter_comparison_windows(now)
    if anterior.contains(fecha):
        return BUCKET_ANTERIOR
    if actual.contains(fecha):
        return BUCKET_ACTUAL
    return None


def get_rolling_windows(
    now: Optional[datetime] = None,
    meses: int = MESES_VENTANA_MOVIL,
    alinear_a_mes: bool = False
) -> Tuple[RangoFechas, RangoFechas]:
    """
    Ventanas móviles (anterior, actual).

    actual   = [hoy - meses, sin límite superior]
    anterior = [hoy - 2*meses, hoy - meses)

    Con `alinear_a_mes` los cortes caen en el día 1 de esos meses.
    """
    now = resolve_now(now)
    base = datetime(now.year, now.month, 1) if alinear_a_mes else now

    corte_actual = restar_meses(base, meses)
    corte_anterior = restar_meses(base, 2 * meses)

    actual = RangoFechas(inicio=corte_actual, fin=None)
    anterior = RangoFechas(inicio=corte_anterior, fin=corte_actual - timedelta(microseconds=1))
    return anterior, actual


# =============================================================================
# ETIQUETAS
# =============================================================================

def quarter_key(fecha: datetime) -> Tuple[int, int]:
    return fecha.year, get_quarter(fecha)


def quarter_label(key: Tuple[int, int]) -> str:
    year, quarter = key
    return f"Q{quarter} {year}"


def month_key(fecha: datetime) -> Tuple[int, int]:
    return fecha.year, fecha.month


def month_label(key: Tuple[int, int]) -> str:
    year, month = key
    return f"{NOMBRES_MESES[month - 1]} {year}"
