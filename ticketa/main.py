from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ticketa.core.errors import ReservationError
from ticketa.core.logging import setup_logging
from ticketa.database.db import Base, engine
from ticketa.models import events, reservations, users  # noqa: F401  (register tables)
from ticketa.routes import events as event_routes
from ticketa.routes import reports as report_routes
from ticketa.routes import reservations as reservation_routes

setup_logging()

app = FastAPI(title="Ticketa")

# Configure CORS
origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(event_routes.router)
app.include_router(reservation_routes.router)
app.include_router(report_routes.router)
