import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from leadhive.database import create_db_and_tables
from leadhive.config import settings
from leadhive.logging_config import setup_logging
from leadhive.auth.router import router as auth_router
from leadhive.users.router import router as users_router
from leadhive.pipelines.router import router as pipelines_router
from leadhive.leads.router import router as leads_router
from leadhive.contacts.router import router as contacts_router
from leadhive.forms.router import router as forms_router, public_router as public_forms_router
from leadhive.dashboard.router import router as dashboard_router

# Every table model must be imported before create_all runs
from leadhive.users.models import User  # noqa: F401
from leadhive.pipelines.models import Pipeline, Stage  # noqa: F401
from leadhive.leads.models import Lead  # noqa: F401
from leadhive.forms.models import LeadForm  # noqa: F401
from leadhive.contacts.models import Contact  # noqa: F401

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_db_and_tables()
    logger.info("%s %s started", settings.APP_TITLE, settings.APP_VERSION)
    yield

app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(pipelines_router)
app.include_router(leads_router)
app.include_router(contacts_router)
app.include_router(forms_router)
app.include_router(public_forms_router)
app.include_router(dashboard_router)

@app.get("/")
def read_root():
    return {"message": "Welcome to the LeadHive API"}
