# turnos/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from turnos.core.config import get_settings
from turnos.core.database import engine, init_db
from turnos.core.errors import TicketError
from turnos.core.logs import configure_logging
from turnos.ticket.routes import router as ticket_router

STATIC_DIR = Path(__file__).parent / "static"

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("turnos")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)
    log.info("Database ready (%s)", engine.dialect.name)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESC,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(ticket_router)


@app.exception_handler(TicketError)
async def ticket_error_handler(request: Request, exc: TicketError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", tags=["Info"])
def root():
    return {
        "message": "Ticket system API is running",
        "version": settings.APP_VERSION,
        "database": engine.dialect.name,
        "endpoints": {
            "GET /": "API information",
            "GET /panel": "Web admin panel",
            "POST /turno": "Create ticket (body: userId, name, request)",
            "GET /turnos": "Full ticket list",
            "GET /turno/:id": "Ticket detail",
            "GET /turno/:id/pdf": "Download ticket PDF",
            "PUT /turno/:id": "Update ticket",
            "DELETE /turno/:id": "Delete ticket",
        },
        "status": "active",
    }


@app.get("/panel", tags=["Info"], include_in_schema=False)
def panel():
    return FileResponse(STATIC_DIR / "panel.html", media_type="text/html")


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
