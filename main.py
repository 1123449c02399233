# Archivo: main.py

from fastapi import FastAPI

from core.config import settings
from modules.evaluaciones import router as evaluaciones_router

# Inicialización de la app
import logging
from logging.handlers import RotatingFileHandler

# Configurar Logging Global
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(), # Consola
        RotatingFileHandler(settings.LOG_FILE, maxBytes=5*1024*1024, backupCount=3) # Archivo 5MB
    ]
)

app = FastAPI(title=settings.APP_NAME)

# Registrar Routers Modulares
app.include_router(evaluaciones_router.router)


@app.get("/health", tags=["Home"])
async def health():
    """Chequeo simple para el balanceador / monitoreo."""
    return {"status": "ok", "app": settings.APP_NAME}

# Si quisieras levantar el servidor: uvicorn main:app --reload
