"""
MS-VISITS-PY - Microservicio de Asignaciones y Visitas Médicas
FastAPI Application
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from .config import settings
from .schemas import HealthResponse

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Crear aplicación FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    Microservicio de asignaciones y visitas médicas para representantes.

    ## Funcionalidades

    * **Asignaciones (Assignments)**: Representante → médico con días, franja horaria, productos y meta de visitas
    * **Series semanales**: Una asignación por médico con ventana de N semanas
    * **Reuniones (Meetings)**: Iniciar, aplazar y finalizar visitas
    * **Productos discutidos**: Selección de productos tratados en cada visita
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Importar y configurar routers después de crear la app para evitar imports circulares
from .routers import (
    assignments_router,
    weekly_assignments_router,
    meetings_router,
    discussed_products_router
)

# Incluir routers
app.include_router(
    assignments_router,
    prefix=settings.API_PREFIX,
    tags=["assignments"]
)

app.include_router(
    weekly_assignments_router,
    prefix=settings.API_PREFIX,
    tags=["weekly-assignments"]
)

app.include_router(
    meetings_router,
    prefix=settings.API_PREFIX,
    tags=["meetings"]
)

app.include_router(
    discussed_products_router,
    prefix=settings.API_PREFIX,
    tags=["discussed-products"]
)


@app.get("/", include_in_schema=False)
async def root():
    """Redireccionar a la documentación"""
    return RedirectResponse(url="/docs")


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def root_health():
    """Health check raíz"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Evento de inicio de la aplicación"""
    if settings.AUTO_CREATE_TABLES:
        from .models import Base, engine
        Base.metadata.create_all(bind=engine)
        print("[INFO] Tablas verificadas/creadas")

    print(f"[STARTUP] {settings.APP_NAME} v{settings.APP_VERSION} iniciado")
    print(f"[INFO] Documentación disponible en: http://{settings.SERVICE_HOST}:{settings.SERVICE_PORT}/docs")
    print(f"[INFO] Endpoints de visitas en: {settings.API_PREFIX}")
    print(f"[INFO] Integraciones: MS-NOTIFICATIONS ({settings.MS_NOTIFICATIONS_URL})")


@app.on_event("shutdown")
async def shutdown_event():
    """Evento de cierre de la aplicación"""
    print(f"[SHUTDOWN] {settings.APP_NAME} detenido")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        reload=settings.DEBUG
    )
