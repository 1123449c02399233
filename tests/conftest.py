import itertools
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from main import app
from modules.evaluaciones.schemas import EvaluationRecord


@pytest.fixture
def client():
    return TestClient(app)


# ===== FIXTURES PARA TESTS DEL MÓDULO EVALUACIONES =====

@pytest.fixture
def make_eval():
    """
    Fábrica de registros de evaluación con valores por defecto razonables.
    Cada llamada genera un id distinto.
    """
    ids = itertools.count(1)

    def _make(
        fecha="2024-02-15",
        puntaje=3,
        tipo="JEFE",
        skill="Python",
        skill_tipo="HARD",
        email="ana@empresa.com",
        nombre="Ana",
        apellido="",
        area="Sistemas",
        origen="ANALISTA",
        evaluador_email="",
    ):
        return EvaluationRecord(
            id=str(next(ids)),
            fecha=fecha,
            evaluado_email=email,
            evaluado_nombre=nombre,
            evaluado_apellido=apellido,
            evaluador_email=evaluador_email,
            tipo_evaluador=tipo,
            skill_tipo=skill_tipo,
            skill_nombre=skill,
            puntaje=puntaje,
            area=area,
            origen=origen,
        )

    return _make


@pytest.fixture
def now_abril():
    """'Hoy' dentro del Q2 2024: Q anterior = Q1 2024."""
    return datetime(2024, 4, 10, 12, 0)


@pytest.fixture
def now_julio():
    """
    'Hoy' para ventanas móviles:
    actual desde 2024-04-15 12:00, anterior desde 2024-01-15 12:00.
    Alineadas a mes: actual desde 2024-04-01, anterior desde 2024-01-01.
    """
    return datetime(2024, 7, 15, 12, 0)
