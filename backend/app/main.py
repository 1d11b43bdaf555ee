# LeadDesk CRM backend entrypoint.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backend.app.core.settings import get_settings
from backend.app.core.log_config import configure_logging
from backend.app.api import analytics
from backend.app.api import courses
from backend.app.api import leads
from backend.app.api import users
from backend.app.core.dev_seed import ensure_default_dev_team
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(leads.router)
app.include_router(courses.router)
app.include_router(users.router)
app.include_router(analytics.router)


@app.get("/")
def read_root():
    return {"app": "LeadDesk CRM backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_database():
    configure_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_dev_team(db)
    finally:
        db.close()
