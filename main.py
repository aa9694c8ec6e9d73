import logging
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

import auth
from catalog import FlightCatalog
from config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT
from database import SessionLocal, init_db
from errors import BookingApiError, NotFound
from identity import IdentityStore
from ledger import BookingLedger
from schemas import (
    AuthResponse,
    BookingCreate,
    BookingDetail,
    BookingResponse,
    BookingUpdate,
    CancellationResponse,
    CurrentUser,
    ErrorResponse,
    FlightOut,
    LoginRequest,
    RegisterRequest,
    RootResponse,
    UserOut,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(
    title="Flight Booking API",
    description="REST API for booking flights, authenticated with bearer tokens",
    version="1.0.0",
    docs_url="/api-docs",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_identity(db: Session = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db)


def get_catalog(db: Session = Depends(get_db)) -> FlightCatalog:
    return FlightCatalog(db)


def get_ledger(db: Session = Depends(get_db)) -> BookingLedger:
    return BookingLedger(db)


#
# Error translation
#

@app.exception_handler(BookingApiError)
async def booking_api_error_handler(request: Request, exc: BookingApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def seed_database_if_empty():
    db = SessionLocal()
    try:
        FlightCatalog(db).seed()
    finally:
        db.close()


@app.on_event("startup")
def on_startup():
    seed_database_if_empty()


@app.get("/", response_model=RootResponse)
def root():
    return RootResponse(
        message="Welcome to the Flight Booking API",
        documentation="/api-docs",
        endpoints={
            "auth": "/api/auth",
            "flights": "/api/flights",
            "bookings": "/api/bookings",
        },
    )


#
# Authentication Endpoints
#

@app.post(
    "/api/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
def register(payload: RegisterRequest, identity: IdentityStore = Depends(get_identity)):
    user = identity.register(payload.name, payload.email, payload.password)
    return AuthResponse(
        message="User registered successfully",
        token=auth.issue_token(user),
        user=UserOut.model_validate(user),
    )


@app.post("/api/auth/login", response_model=AuthResponse, responses=ERRORS)
def login(payload: LoginRequest, identity: IdentityStore = Depends(get_identity)):
    user = identity.authenticate(payload.email, payload.password)
    return AuthResponse(
        message="Login successful",
        token=auth.issue_token(user),
        user=UserOut.model_validate(user),
    )


@app.get("/api/auth/profile", response_model=UserOut, responses=ERRORS)
def profile(
    current_user: CurrentUser = Depends(auth.get_current_user),
    identity: IdentityStore = Depends(get_identity),
):
    user = identity.find_by_id(current_user.id)
    if not user:
        raise NotFound("User not found")
    return user


#
# Flight Endpoints
#

@app.get("/api/flights", response_model=List[FlightOut], responses=ERRORS)
def list_flights(
    origin: Optional[str] = Query(None, description="Origin city, case-insensitive substring"),
    destination: Optional[str] = Query(None, description="Destination city, case-insensitive substring"),
    departure_date: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD"),
    catalog: FlightCatalog = Depends(get_catalog),
):
    return catalog.list(origin=origin, destination=destination, departure_date=departure_date)


@app.get("/api/flights/search/origins", response_model=List[str])
def list_origins(catalog: FlightCatalog = Depends(get_catalog)):
    return sorted(catalog.list_distinct_origins())


@app.get("/api/flights/search/destinations", response_model=List[str])
def list_destinations(catalog: FlightCatalog = Depends(get_catalog)):
    return sorted(catalog.list_distinct_destinations())


@app.get("/api/flights/{flight_id}", response_model=FlightOut, responses=ERRORS)
def flight_detail(flight_id: int, catalog: FlightCatalog = Depends(get_catalog)):
    flight = catalog.get_by_id(flight_id)
    if not flight:
        raise NotFound("Flight not found")
    return flight


#
# Booking Endpoints
#

@app.get("/api/bookings", response_model=List[BookingDetail], responses=ERRORS)
def list_bookings(
    current_user: CurrentUser = Depends(auth.get_current_user),
    ledger: BookingLedger = Depends(get_ledger),
):
    return ledger.list_for_user(current_user.id)


@app.get("/api/bookings/{booking_id}", response_model=BookingDetail, responses=ERRORS)
def booking_detail(
    booking_id: int,
    current_user: CurrentUser = Depends(auth.get_current_user),
    ledger: BookingLedger = Depends(get_ledger),
):
    return ledger.get_by_id(current_user.id, booking_id)


@app.post(
    "/api/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**ERRORS, 409: {"model": ErrorResponse}},
)
def create_booking(
    payload: BookingCreate,
    current_user: CurrentUser = Depends(auth.get_current_user),
    ledger: BookingLedger = Depends(get_ledger),
):
    booking = ledger.create(current_user.id, payload.flight_id, payload.passengers)
    return BookingResponse(message="Booking created successfully", booking=booking)


@app.put(
    "/api/bookings/{booking_id}",
    response_model=BookingResponse,
    responses={**ERRORS, 409: {"model": ErrorResponse}},
)
def modify_booking(
    booking_id: int,
    payload: BookingUpdate,
    current_user: CurrentUser = Depends(auth.get_current_user),
    ledger: BookingLedger = Depends(get_ledger),
):
    booking = ledger.modify(current_user.id, booking_id, payload.passengers)
    return BookingResponse(message="Booking modified successfully", booking=booking)


@app.delete("/api/bookings/{booking_id}", response_model=CancellationResponse, responses=ERRORS)
def cancel_booking(
    booking_id: int,
    current_user: CurrentUser = Depends(auth.get_current_user),
    ledger: BookingLedger = Depends(get_ledger),
):
    booking = ledger.cancel(current_user.id, booking_id)
    return CancellationResponse(message="Booking cancelled successfully", booking=booking)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
