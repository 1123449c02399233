import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

class Settings(BaseSettings):
    # --- Aplicación ---
    APP_NAME: str = os.getenv("APP_NAME", "Skills Dashboard Core")

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "system_errors.log")

    # Zona horaria de referencia para "ahora" y para normalizar fechas con offset
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Argentina/Buenos_Aires")

    # --- Sesión (la consume la capa de autenticación, no el core) ---
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))  # 24 horas

settings = Settings()
