from os import getenv

class Settings:
    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))  #expire au bout de 15 minutes
    JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  #expire au bout d'1 mois

    # Google Tasks
    GOOGLE_TASKS_TIMEOUT = float(getenv("GOOGLE_TASKS_TIMEOUT", "10"))  # secondes par appel
    GOOGLE_TASKLIST_ID = getenv("GOOGLE_TASKLIST_ID", "@default")

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
