import pytest

from modules.evaluaciones.aggregation import CompositeSkillPoint
from modules.evaluaciones.comparator import ComparacionPeriodos, SkillPeriodPoint
from modules.evaluaciones.projector import (
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
from modules.evaluaciones.schemas import ExpectedSkillEntry, ExpectedSkillTable, SeniorityBand, SkillType


def _punto(skill, auto, jefe, promedio, tipo=SkillType.HARD):
    return SkillPeriodPoint(skill=skill, tipo=tipo, auto=auto, jefe=jefe, promedio=promedio)


class TestRadarAndTrend:

    def test_project_radar(self):
        punto = CompositeSkillPoint(skill="Python", esperado=3, auto=4, jefe=2, promedio=2)
        assert project_radar([punto]) == [
            {"skill": "Python", "esperado": 3, "auto": 4, "jefe": 2, "promedio": 2}
        ]

    def test_quarter_trend_chronological(self, make_eval):
        registros = [
            make_eval(fecha="2024-02-10", skill="Python", puntaje=3),
            make_eval(fecha="2024-02-10", skill="SQL", puntaje=2),
            make_eval(fecha="2023-11-10", skill="Git", tipo="AUTO", puntaje=4),
        ]
        tabla = ExpectedSkillTable([
            ExpectedSkillEntry(seniority="Junior", rol="Analista", area="Sistemas",
                               skill_nombre="Python", valor_esperado=3),
        ])
        q4, q1 = project_quarter_trend(registros, tabla, "Junior", "Analista", "Sistemas")

        assert q4["trimestre"] == "Q4 2023"
        assert (q4["auto"], q4["jefe"], q4["promedio"], q4["esperado"]) == (4.0, 0.0, 4.0, 0.0)
        assert q1["trimestre"] == "Q1 2024"
        assert q1["promedio"] == 2.5
        # SQL no tiene expectativa: solo cuenta Python
        assert q1["esperado"] == 3.0


class TestComparisonBars:

    def test_truncates_and_sorts(self):
        comparacion = ComparacionPeriodos(
            anterior=[_punto("Comunicación Efectiva", 0, 3, 3.0, SkillType.SOFT), _punto("Python", 0, 2, 2.0)],
            actual=[_punto("Python", 0, 4, 4.0), _punto("SQL", 0, 1, 1.0)],
        )
        barras = project_comparison_bars(comparacion)

        assert [b["skill_completo"] for b in barras] == ["Python", "SQL", "Comunicación Efectiva"]
        assert barras[0]["mejora"] == 2.0
        assert barras[-1]["skill"] == "Comunicación Ef..."
        assert barras[-1]["q_actual"] == 0.0
        assert barras[-1]["tipo"] == SkillType.SOFT

    def test_empty(self):
        assert project_comparison_bars(ComparacionPeriodos()) == []

    def test_highlight_thresholds(self):
        barras = [
            {"skill": "A", "tipo": SkillType.HARD, "mejora": 0.3},
            {"skill": "B", "tipo": SkillType.HARD, "mejora": 0.31},
            {"skill": "C", "tipo": SkillType.HARD, "mejora": -0.1},
            {"skill": "D", "tipo": SkillType.HARD, "mejora": -0.11},
            {"skill": "E", "tipo": SkillType.SOFT, "mejora": 1.0},
        ]
        destacados = project_highlights(barras, SkillType.HARD)
        assert [b["skill"] for b in destacados["destacadas"]] == ["B"]
        assert [b["skill"] for b in destacados["atencion"]] == ["D"]


class TestDumbbell:

    def test_gap_change_labels(self):
        comparacion = ComparacionPeriodos(
            anterior=[_punto("Python", 4, 2, 2.0), _punto("SQL", 3, 3, 3.0), _punto("Git", 3, 3, 3.0)],
            actual=[_punto("Python", 3, 3, 3.0), _punto("SQL", 4, 2, 2.0), _punto("Git", 3, 3, 3.0),
                    _punto("Docker", 4, 1, 1.0)],
        )
        filas = {f["skill"]: f for f in project_dumbbell(comparacion)}

        assert filas["Python"]["tendencia_brecha"] == "Cerró"
        assert filas["SQL"]["tendencia_brecha"] == "Abrió"
        assert filas["Git"]["tendencia_brecha"] == "Igual"
        assert filas["Docker"]["gap_change"] is None
        assert filas["Docker"]["tendencia_brecha"] is None
        assert filas["Docker"]["esperado"] == 0.0

    def test_sorted_by_current_gap(self):
        comparacion = ComparacionPeriodos(
            actual=[_punto("Python", 3, 3, 3.0), _punto("Docker", 4, 1, 1.0), _punto("SQL", 4, 2, 2.0)],
        )
        assert [f["skill"] for f in project_dumbbell(comparacion)] == ["Docker", "SQL", "Python"]


class TestStrengths:

    def test_rounded_threshold(self):
        """3.3 - 3 no llega a 0.3 en punto flotante, pero redondeado sí."""
        puntos = [
            CompositeSkillPoint(skill="Python", esperado=3, auto=0, jefe=3.3, promedio=3.3),
            CompositeSkillPoint(skill="SQL", esperado=3, auto=0, jefe=2.5, promedio=2.5),
            CompositeSkillPoint(skill="Git", esperado=3, auto=0, jefe=3.1, promedio=3.1),
        ]
        resultado = project_strengths(puntos)
        assert [f["skill"] for f in resultado["fortalezas"]] == ["Python"]
        assert resultado["fortalezas"][0]["diferencia"] == 0.3
        assert [m["skill"] for m in resultado["mejoras"]] == ["SQL"]

    def test_same_skill_in_several_radars_is_averaged(self):
        puntos = [
            CompositeSkillPoint(skill="Python", esperado=2, auto=0, jefe=4, promedio=4),
            CompositeSkillPoint(skill="Python", esperado=2, auto=0, jefe=2, promedio=2),
        ]
        fortaleza, = project_strengths(puntos)["fortalezas"]
        assert fortaleza["promedio"] == 3.0

    def test_top_five(self):
        puntos = [
            CompositeSkillPoint(skill=f"S{i}", esperado=1, auto=0, jefe=1 + i, promedio=1 + i)
            for i in range(1, 8)
        ]
        fortalezas = project_strengths(puntos)["fortalezas"]
        assert [f["skill"] for f in fortalezas] == ["S7", "S6", "S5", "S4", "S3"]


class TestMonthlySeries:

    @pytest.fixture
    def registros(self, make_eval):
        return [
            make_eval(fecha="2024-01-10", puntaje=2),
            make_eval(fecha="2024-02-10", puntaje=4, email="beto@empresa.com"),
            make_eval(fecha="2024-02-10", puntaje=1, email="carla@empresa.com"),
        ]

    def test_by_seniority_missing_band_is_none(self, registros):
        bandas = {"ana@empresa.com": "Junior", "beto@empresa.com": "Senior"}
        enero, febrero = group_by_month_and_seniority(registros, bandas)

        assert enero["mes"] == "Ene 2024"
        assert enero["Junior"] == 2.0
        assert enero["Senior"] is None
        assert febrero["Senior"] == 4.0
        assert febrero["Trainee"] is None

    def test_by_skill_type_missing_is_zero(self, registros):
        bandas = {"ana@empresa.com": "Junior", "beto@empresa.com": "Senior"}
        enero, _ = group_by_month_skill_type_and_seniority(registros, bandas)
        assert enero["Junior_Hard"] == 2.0
        assert enero["Junior_Soft"] == 0.0
        assert enero["Senior_Hard"] == 0.0

    def test_unmapped_people_are_ignored(self, registros):
        assert group_by_month_and_seniority(registros, {}) == []


class TestGapMatrix:

    def test_monthly_coincidence(self, make_eval):
        registros = [
            make_eval(fecha="2024-01-10", tipo="AUTO", puntaje=4),
            make_eval(fecha="2024-01-20", tipo="JEFE", puntaje=3),
            make_eval(fecha="2024-02-10", tipo="JEFE", puntaje=3),
            make_eval(fecha="2024-02-10", tipo="AUTO", puntaje=1, email="beto@empresa.com"),
        ]
        enero, febrero = calculate_gap_matrix(registros, email="ana@empresa.com")

        assert enero.mes == "Ene 2024"
        assert enero.gap_promedio == 1.0
        assert enero.porcentaje_coincidencia == 80.0
        assert enero.promedio_general == 3.0
        # Falta la autoevaluación: sin coincidencia
        assert febrero.porcentaje_coincidencia == 0.0

    def test_empty(self):
        assert calculate_gap_matrix([]) == []


class TestSummaries:

    def test_summarize_by_person(self, make_eval):
        registros = [
            make_eval(tipo="AUTO", puntaje=4, apellido="Pérez"),
            make_eval(tipo="JEFE", puntaje=2),
            make_eval(tipo="JEFE", puntaje=3, email="beto@empresa.com", nombre="Beto",
                      origen="LIDER", area="Ventas"),
        ]
        ana, beto = summarize_by_person(registros)

        assert ana.nombre == "Ana Pérez"
        assert ana.rol == "Analista"
        assert (ana.promedio_auto, ana.promedio_jefe, ana.promedio_final) == (4.0, 2.0, 2.0)
        assert ana.seniority_alcanzado == SeniorityBand.SEMI_SENIOR
        assert ana.gap == 2.0
        assert beto.rol == "Líder"
        assert beto.promedio_auto == 0.0

    def test_summarize_organization(self, make_eval):
        resultados = summarize_by_person([
            make_eval(tipo="AUTO", puntaje=4),
            make_eval(tipo="JEFE", puntaje=2),
            make_eval(puntaje=3, email="beto@empresa.com", area="Ventas"),
        ])
        metricas = summarize_organization(resultados)

        assert metricas.total == 2
        assert metricas.por_seniority == {"Trainee": 0, "Junior": 0, "Semi Senior": 1, "Senior": 1}
        # Beto solo tiene evaluación de jefe: su brecha es el puntaje completo
        assert metricas.gap_promedio == 2.5
        assert metricas.por_area == {"Sistemas": 1, "Ventas": 1}
        assert seniority_by_email(resultados) == {"ana@empresa.com": "Semi Senior", "beto@empresa.com": "Senior"}

    def test_empty_organization(self):
        metricas = summarize_organization([])
        assert metricas.total == 0
        assert metricas.gap_promedio == 0.0
