"""
Constantes de negocio para el cálculo de desempeño.
Cada umbral pertenece a una vista concreta: no reutilizar uno por otro.
"""

# ============================================
# ESCALA DE PUNTAJES
# ============================================
PUNTAJE_MIN = 1
PUNTAJE_MAX = 4

SIN_DATOS = 0.0
"""Centinela de "sin datos". Nunca es un puntaje real."""

# ============================================
# BANDAS DE SENIORITY (límite inferior inclusivo)
# ============================================
UMBRAL_SENIOR = 3.0
UMBRAL_SEMI_SENIOR = 2.0
UMBRAL_JUNIOR = 1.0

# ============================================
# CLASIFICACIÓN DE TENDENCIA (Q anterior vs Q actual)
# ============================================
UMBRAL_DELTA_TENDENCIA = 0.2
"""delta > 0.2 mejoró, delta < -0.2 empeoró, resto igual"""

# ============================================
# RECUADROS DESTACADOS (barras de comparación por skill)
# ============================================
UMBRAL_MEJORA_DESTACADA = 0.3
"""mejora > 0.3 se muestra como mejora notable"""

UMBRAL_REQUIERE_ATENCION = -0.1
"""mejora < -0.1 se muestra como skill que requiere atención"""

# ============================================
# FORTALEZAS VS ESPERADO (tarjetas del analista)
# ============================================
UMBRAL_FORTALEZA = 0.3
"""promedio - esperado >= 0.3 se considera fortaleza"""

MAX_ITEMS_DESTACADOS = 5

# ============================================
# VENTANAS MÓVILES
# ============================================
MESES_VENTANA_MOVIL = 3

UMBRAL_CAMBIO_SIGNIFICATIVO = 0.05
"""Cambios con |delta| <= 0.05 se consideran ruido (top cambios, tendencia)"""

UMBRAL_CAMBIO_BRECHA = 0.1
"""Variación de brecha auto/jefe para marcar si se cerró o se abrió"""

# ============================================
# BRECHA AUTO VS JEFE
# ============================================
ESCALA_MAX_BRECHA = 5
"""Denominador del % de coincidencia en la matriz de cierre de brecha"""

# ============================================
# DEFAULTS DE PROYECCIÓN
# ============================================
TARGET_DEFAULT = 3
"""Valor objetivo cuando la skill no tiene target definido"""

TARGET_SCORE_HARD_SOFT = 4.0

MAX_LARGO_ETIQUETA = 15

NOMBRES_MESES = ['Ene', 'Feb', 'Mar', 'Abr', 'May', 'Jun',
                 'Jul', 'Ago', 'Sep', 'Oct', 'Nov', 'Dic']
