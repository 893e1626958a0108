from fastapi import FastAPI
from app.core.database import engine, Base
from app.core.errors import register_error_handlers
from app.core.logging_setup import setup_logging
from app.models import task, user  # enregistre les tables sur Base
from app.routers import health, auth, tasks, google_tasks

setup_logging()

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="TaskFlow API",
    version="0.1.0"
)

register_error_handlers(app)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(google_tasks.router)
