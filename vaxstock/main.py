import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from vaxstock.config import settings
from vaxstock.models.database import create_db_and_tables
from vaxstock.routers import (
    administrations,
    alerts,
    lots,
    reconciliations,
    thresholds,
    vaccines,
)
from fastapi.middleware.cors import CORSMiddleware  # CORS

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Crear la base de datos y las tablas al iniciar la aplicación
@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Base de datos lista")
    yield


app = FastAPI(title="vaxstock", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Incluir routers
app.include_router(vaccines.router)
app.include_router(lots.router)
app.include_router(alerts.router)
app.include_router(reconciliations.router)
app.include_router(administrations.router)
app.include_router(thresholds.router)


@app.get("/")
def read_root():
    return {"message": "API funcionando correctamente"}
