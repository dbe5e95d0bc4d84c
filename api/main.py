# api/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from circulation.config import configure_logging, settings
from circulation.errors import CirculationError
from api.dependencies import get_system
from api.routes import books, loans, reservations

logger = logging.getLogger(__name__)

# Error kind -> HTTP status
ERROR_STATUS = {
    "NotFound": status.HTTP_404_NOT_FOUND,
    "Forbidden": status.HTTP_403_FORBIDDEN,
    "OutOfStock": status.HTTP_400_BAD_REQUEST,
    "AlreadyReturned": status.HTTP_400_BAD_REQUEST,
    "AlreadyBorrowed": status.HTTP_400_BAD_REQUEST,
    "DuplicateReservation": status.HTTP_400_BAD_REQUEST,
    "ReservationLimitExceeded": status.HTTP_400_BAD_REQUEST,
    "InvalidState": status.HTTP_400_BAD_REQUEST,
    "InvalidRequest": status.HTTP_400_BAD_REQUEST,
    "HasActiveLoans": status.HTTP_409_CONFLICT,
    "IsbnConflict": status.HTTP_409_CONFLICT,
    "ConcurrencyConflict": status.HTTP_409_CONFLICT,
    "InventoryInconsistent": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

app = FastAPI(title="Library circulation")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(books.router)
app.include_router(loans.router)
app.include_router(reservations.router)


@app.exception_handler(CirculationError)
async def circulation_error_handler(request: Request, exc: CirculationError):
    status_code = ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"error": exc.kind, "detail": exc.message})


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    configure_logging()
    get_system().database.init_db()


@app.get("/")
async def root():
    return {"message": "Library circulation service"}


# Main execution
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=["api", "circulation"]
    )
