import pytest
from httpx import ASGITransport, AsyncClient

from main import app

FECHA_REFERENCIA = "2024-07-15T12:00:00"


def _registro(id_, fecha, tipo, puntaje, skill="Python", skill_tipo="HARD", email="ana@empresa.com",
              nombre="Ana", origen="ANALISTA", evaluador=""):
    """Registro tal como llega desde la planilla (camelCase)."""
    return {
        "id": id_,
        "fecha": fecha,
        "evaluadoEmail": email,
        "evaluadoNombre": nombre,
        "evaluadorEmail": evaluador,
        "tipoEvaluador": tipo,
        "skillTipo": skill_tipo,
        "skillNombre": skill,
        "puntaje": puntaje,
        "area": "Sistemas",
        "origen": origen,
    }


@pytest.fixture
def registros():
    return [
        _registro("1", "2024-03-01", "AUTO", 4),
        _registro("2", "2024-03-01", "JEFE", 2, evaluador="lider@empresa.com"),
        _registro("3", "2024-05-01", "JEFE", 4, evaluador="lider@empresa.com"),
        _registro("4", "2024-05-01", "JEFE", 3, skill="Comunicación", skill_tipo="SOFT",
                  evaluador="lider@empresa.com"),
    ]


class TestEvaluacionesRouter:
    """Endpoints JSON del módulo evaluaciones."""

    def test_periodos(self, client):
        response = client.get("/evaluaciones/periodos")
        assert response.status_code == 200
        tokens = [p["value"] for p in response.json()]
        assert tokens[0] == "HISTORICO"
        assert len(tokens) == 10

    def test_radar(self, client):
        payload = {
            "evaluations": [
                _registro("1", "2024-03-01", "AUTO", 4),
                _registro("2", "2024-03-01", "JEFE", 2),
                _registro("3", "2024-03-01", "JEFE", 3, skill="Comunicación", skill_tipo="SOFT"),
            ],
            "skillsMatrix": [
                {"seniority": "Junior", "rol": "Analista", "area": "Sistemas",
                 "skillNombre": "Python", "valorEsperado": 3},
            ],
            "seniorityEsperado": "Junior",
            "rol": "Analista",
        }
        response = client.post("/evaluaciones/radar", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["hard"] == [{"skill": "Python", "esperado": 3.0, "auto": 4.0, "jefe": 2.0, "promedio": 2.0}]
        assert data["soft"][0]["esperado"] == 0.0
        assert data["promedio_general"] == 2.5
        assert data["seniority_alcanzado"] == "Semi Senior"
        assert data["estado"] == "Superó"
        assert data["tendencia_trimestral"][0]["trimestre"] == "Q1 2024"

    def test_radar_rejects_invalid_score(self, client):
        payload = {
            "evaluations": [_registro("1", "2024-03-01", "AUTO", 5)],
            "rol": "Analista",
        }
        response = client.post("/evaluaciones/radar", json=payload)
        assert response.status_code == 422

    def test_comparacion(self, client):
        payload = {
            "evaluations": [
                _registro("1", "2024-02-10", "JEFE", 2),
                _registro("2", "2024-04-05", "JEFE", 4),
                _registro("3", "2024-04-05", "JEFE", 3, skill="SQL"),
            ],
            "evaluadoEmail": "ana@empresa.com",
            "fechaReferencia": "2024-04-10T12:00:00",
        }
        response = client.post("/evaluaciones/comparacion", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["analisis"]["mejoraron"] == ["Python"]
        assert data["analisis"]["nuevas"] == ["SQL"]
        # SQL es nueva: su mejora es el puntaje completo del Q actual
        assert [b["skill"] for b in data["barras"]] == ["SQL", "Python"]
        assert {b["skill_completo"] for b in data["destacados"]["HARD"]["destacadas"]} == {"SQL", "Python"}
        assert data["brechas"][0]["gap_actual"] == 4.0

    def test_salto_nivel(self, client, registros):
        payload = {"evaluations": registros, "fechaReferencia": FECHA_REFERENCIA}
        response = client.post("/evaluaciones/salto-nivel", json=payload)

        assert response.status_code == 200
        fila, = response.json()
        assert fila["q1_score"] == 2.0
        assert fila["q2_score"] == 3.5
        assert fila["salto_nivel"] is True

    def test_evolucion(self, client, registros):
        payload = {
            "evaluations": registros,
            "evaluadoEmail": "ana@empresa.com",
            "fechaReferencia": FECHA_REFERENCIA,
        }
        response = client.post("/evaluaciones/evolucion", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["desglose"]["hard_skills"][0]["skill"] == "Python"
        assert [m["mes"] for m in data["matriz_brecha"]] == ["Mar 2024", "May 2024"]

    def test_equipo(self, client, registros):
        payload = {
            "evaluations": registros,
            "usuario": {"email": "lider@empresa.com", "rol": "Lider", "area": "Sistemas"},
            "fechaReferencia": FECHA_REFERENCIA,
        }
        response = client.post("/evaluaciones/equipo", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["evaluados"] == [{"email": "ana@empresa.com", "nombre": "Ana"}]
        assert data["resultados"][0]["promedio_auto"] == 4.0

    def test_equipo_denied_for_analista(self, client, registros):
        payload = {
            "evaluations": registros,
            "usuario": {"email": "ana@empresa.com", "rol": "Analista"},
        }
        response = client.post("/evaluaciones/equipo", json=payload)
        assert response.status_code == 403

    def test_resumen(self, client, registros):
        payload = {
            "evaluations": registros,
            "periodo": "HISTORICO",
            "usuario": {"email": "rrhh@empresa.com", "rol": "RRHH"},
            "fechaReferencia": FECHA_REFERENCIA,
        }
        response = client.post("/evaluaciones/resumen", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["metricas"]["total"] == 1
        assert data["puede_exportar"] is True
        assert set(data["tendencias_seniority"]) == {"Trainee", "Junior", "Semi Senior", "Senior"}

    def test_resumen_rejects_unknown_period(self, client):
        response = client.post("/evaluaciones/resumen", json={"periodo": "ULTIMA_DECADA"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_resumen_async_client(self, registros):
        """El endpoint responde igual desde un cliente asíncrono."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.post("/evaluaciones/resumen", json={"evaluations": registros})

        assert response.status_code == 200
        assert response.json()["resultados"][0]["email"] == "ana@empresa.com"
