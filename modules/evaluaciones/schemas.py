# Archivo: modules/evaluaciones/schemas.py

from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.config import settings
from .constants import PUNTAJE_MAX, PUNTAJE_MIN
from .periods import PeriodoType


# --- Enumeraciones del dominio ---

class EvaluatorType(str, Enum):
    """Quién hizo la evaluación."""
    AUTO = "AUTO"   # autoevaluación
    JEFE = "JEFE"   # evaluación del líder


class SkillType(str, Enum):
    HARD = "HARD"
    SOFT = "SOFT"


class FormOrigin(str, Enum):
    """Formulario que originó el registro (independiente del tipo de evaluador)."""
    ANALISTA = "ANALISTA"
    LIDER = "LIDER"


class SeniorityBand(str, Enum):
    """Bandas ordenadas: el orden de declaración es el orden ordinal."""
    TRAINEE = "Trainee"
    JUNIOR = "Junior"
    SEMI_SENIOR = "Semi Senior"
    SENIOR = "Senior"


class EstadoCumplimiento(str, Enum):
    SUPERO = "Superó"
    CUMPLE = "Cumple"
    NO_CUMPLE = "No Cumple"


class UserRole(str, Enum):
    RRHH = "RRHH"
    DIRECTOR = "Director"
    LIDER = "Lider"
    ANALISTA = "Analista"


# --- Base Schemas ---

def _a_hora_local(value: Optional[datetime]) -> Optional[datetime]:
    # Con offset: se lleva a la zona local y se descarta el tzinfo
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)
    return value


class _CamelModel(BaseModel):
    """Acepta camelCase (API de planillas) y snake_case indistintamente."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )


class EvaluationRecord(_CamelModel):
    """Un registro por evaluador × skill × persona × fecha."""
    id: str
    fecha: datetime = Field(..., description="Fecha de la evaluación (semántica de día calendario).")
    evaluado_email: str
    evaluado_nombre: str
    evaluado_apellido: str = ""
    evaluador_email: str = Field("", description="Puede venir vacío desde la planilla.")
    tipo_evaluador: EvaluatorType
    skill_tipo: SkillType
    skill_nombre: str
    puntaje: int = Field(..., ge=PUNTAJE_MIN, le=PUNTAJE_MAX)
    area: str
    origen: FormOrigin
    comentarios: Optional[str] = None

    @field_validator("fecha", mode="before")
    @classmethod
    def _parse_fecha(cls, value):
        # Fechas sin hora se toman como inicio del día
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str) and len(value.strip()) == 10:
            return datetime.combine(date.fromisoformat(value.strip()), datetime.min.time())
        return value

    @field_validator("fecha")
    @classmethod
    def _normalizar_zona(cls, value: datetime) -> datetime:
        return _a_hora_local(value)

    @field_validator("evaluador_email", mode="before")
    @classmethod
    def _evaluador_vacio(cls, value):
        return value or ""

    @property
    def nombre_completo(self) -> str:
        return f"{self.evaluado_nombre} {self.evaluado_apellido or ''}".strip()


class ExpectedSkillEntry(_CamelModel):
    """Fila de la matriz de skills esperadas."""
    seniority: str
    rol: str
    area: str
    skill_nombre: str
    valor_esperado: float = 0.0
    tipo: Optional[SkillType] = None


ExpectedKey = Tuple[str, str, str, str]


class ExpectedSkillTable:
    """
    Matriz de valores esperados indexada por (skill, seniority, rol, area).

    La ausencia de una combinación devuelve 0 = "sin expectativa definida".
    """

    def __init__(self, entries: Iterable[ExpectedSkillEntry] = ()):
        self._valores: Dict[ExpectedKey, float] = {}
        for entry in entries:
            key = (entry.skill_nombre, entry.seniority, entry.rol, entry.area)
            # La primera fila gana, igual que una búsqueda lineal
            self._valores.setdefault(key, entry.valor_esperado)

    def get(self, skill_nombre: str, seniority: str, rol: str, area: str) -> float:
        return self._valores.get((skill_nombre, seniority, rol, area), 0.0) or 0.0

    def __len__(self) -> int:
        return len(self._valores)

    def __contains__(self, key: ExpectedKey) -> bool:
        return key in self._valores


class Usuario(_CamelModel):
    email: str
    nombre: str = ""
    rol: UserRole
    area: str = ""


class TargetSkill(_CamelModel):
    """Valor objetivo de una skill para las vistas de ventana móvil."""
    skill: str
    valor_esperado: float


# --- Request Schemas (router) ---

class _DashboardRequest(_CamelModel):
    """Registros a procesar y fecha de referencia opcional ('hoy' del reporte)."""
    evaluations: List[EvaluationRecord] = []
    fecha_referencia: Optional[datetime] = None

    @field_validator("fecha_referencia")
    @classmethod
    def _normalizar_zona(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _a_hora_local(value)


class RadarRequest(_DashboardRequest):
    skills_matrix: List[ExpectedSkillEntry] = []
    seniority_esperado: SeniorityBand = SeniorityBand.JUNIOR
    rol: str
    area: Optional[str] = None
    periodo: PeriodoType = PeriodoType.HISTORICO
    evaluado_email: Optional[str] = None


class ComparacionRequest(_DashboardRequest):
    evaluado_email: Optional[str] = None
    skills_matrix: List[ExpectedSkillEntry] = []
    seniority_esperado: SeniorityBand = SeniorityBand.JUNIOR
    rol: str = ""
    area: str = ""


class SaltoNivelRequest(_DashboardRequest):
    evaluado_email: Optional[str] = None
    origen: Optional[FormOrigin] = None


class ResumenRequest(_DashboardRequest):
    periodo: PeriodoType = PeriodoType.HISTORICO
    usuario: Optional[Usuario] = None


class EvolucionRequest(_DashboardRequest):
    evaluado_email: str
    targets: List[TargetSkill] = []


class EquipoRequest(_DashboardRequest):
    usuario: Usuario
    periodo: PeriodoType = PeriodoType.HISTORICO
    targets: List[TargetSkill] = []
