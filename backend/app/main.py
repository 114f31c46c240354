import json
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from app.agendamentos.check_availability import (
    REQUIRED_FIELDS_MESSAGE,
    get_locality_availability,
    map_validation_error,
)
from app.agendamentos.create_booking import create_booking, parse_create_booking_args
from app.agendamentos.find_booking import find_booking_with_eligibility, serialize_booking
from app.agendamentos.manage_booking import parse_reschedule_booking_args, reschedule_booking
from app.agendamentos.slot_rules import current_local_date, load_slot_policy
from app.backoffice.agendamentos import (
    bulk_delete_bookings,
    complete_booking,
    delete_booking,
    list_bookings,
    parse_bulk_delete_args,
    parse_list_bookings_args,
)
from app.config import AUTO_CREATE_TABLES, CORS_ALLOW_ORIGINS, STATIC_DIR
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.db.store import BookingStore
from app.errors import BookingError, StoreError
from app.security.dependencies import require_backoffice_token
from app.security.tokens import issue_backoffice_token, parse_login_args


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    return logging.getLogger("agendamentos.backend")


logger = configure_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info(json.dumps({"event": "tables_ready", "table": "agendamentos"}))
    yield
    engine.dispose()
    logger.info(json.dumps({"event": "engine_disposed"}))


app = FastAPI(title="Agendamentos Backend", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    start_time = time.perf_counter()

    response = await call_next(request)

    duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
    response.headers["x-request-id"] = request_id

    logger.info(
        json.dumps(
            {
                "event": "http_request",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
        )
    )
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, _exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "ok": False,
            "error_code": "INVALID_ARGS",
            "human_message": REQUIRED_FIELDS_MESSAGE,
        },
    )


def _error_response(exc: BookingError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error(json.dumps({"event": "store_error", "error_code": exc.error_code}))
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def _invalid_args_response(exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, **map_validation_error(exc)})


@app.get("/health")
async def health():
    return JSONResponse(content={"ok": True})


@app.get("/api/disponibilidade/{localidade}")
async def get_disponibilidade(localidade: str) -> JSONResponse:
    db = SessionLocal()
    try:
        availability = get_locality_availability(
            store=BookingStore(db),
            locality=localidade,
            today=current_local_date(),
            policy=load_slot_policy(),
        )
        return JSONResponse(content={"ok": True, "data": availability})
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.post("/api/agendamentos")
async def create_agendamento(payload: dict[str, Any]) -> JSONResponse:
    try:
        args = parse_create_booking_args(payload)
    except ValidationError as exc:
        return _invalid_args_response(exc)

    db = SessionLocal()
    try:
        booking = create_booking(
            store=BookingStore(db),
            args=args,
            today=current_local_date(),
            policy=load_slot_policy(),
        )
        return JSONResponse(
            status_code=201,
            content={
                "ok": True,
                "data": {
                    "message": "Agendamento criado com sucesso!",
                    "agendamento": serialize_booking(booking),
                },
            },
        )
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.get("/api/agendamentos/{nota}")
async def get_agendamento(nota: str) -> JSONResponse:
    db = SessionLocal()
    try:
        result = find_booking_with_eligibility(
            store=BookingStore(db),
            note_number=nota,
            today=current_local_date(),
            policy=load_slot_policy(),
        )
        return JSONResponse(content={"ok": True, "data": result})
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.post("/api/agendamentos/{nota}/reagendar")
async def reagendar_agendamento(nota: str, payload: dict[str, Any]) -> JSONResponse:
    try:
        args = parse_reschedule_booking_args(payload)
    except ValidationError as exc:
        if any(item.get("type") == "missing" for item in exc.errors()):
            return JSONResponse(
                status_code=400,
                content={
                    "ok": False,
                    "error_code": "INVALID_ARGS",
                    "human_message": "Nova data e período são obrigatórios.",
                },
            )
        return _invalid_args_response(exc)

    db = SessionLocal()
    try:
        booking = reschedule_booking(
            store=BookingStore(db),
            note_number=nota,
            args=args,
            today=current_local_date(),
            now=datetime.now(timezone.utc),
            policy=load_slot_policy(),
        )
        return JSONResponse(
            content={
                "ok": True,
                "data": {
                    "message": "Reagendamento concluído com sucesso!",
                    "agendamento": serialize_booking(booking),
                },
            }
        )
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.post("/api/login")
async def login(payload: dict[str, Any]) -> JSONResponse:
    try:
        args = parse_login_args(payload)
    except ValidationError:
        return JSONResponse(
            status_code=400,
            content={
                "ok": False,
                "error_code": "INVALID_ARGS",
                "human_message": "Informe a senha.",
            },
        )

    try:
        token = issue_backoffice_token(args.password)
    except BookingError as exc:
        return _error_response(exc)

    return JSONResponse(
        content={
            "ok": True,
            "data": {"message": "Login bem-sucedido", "token": token, "token_type": "bearer"},
        }
    )


@app.get("/api/backoffice/agendamentos", dependencies=[Depends(require_backoffice_token)])
async def backoffice_list_agendamentos(
    localidade: str | None = None,
    status: str | None = None,
    data: str | None = None,
) -> JSONResponse:
    try:
        args = parse_list_bookings_args({"localidade": localidade, "status": status, "data": data})
    except ValidationError as exc:
        return _invalid_args_response(exc)

    db = SessionLocal()
    try:
        bookings = list_bookings(store=BookingStore(db), args=args)
        return JSONResponse(
            content={
                "ok": True,
                "data": {"agendamentos": [serialize_booking(item) for item in bookings]},
            }
        )
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.post(
    "/api/backoffice/agendamentos/excluir-massa",
    dependencies=[Depends(require_backoffice_token)],
)
async def backoffice_bulk_delete(payload: dict[str, Any]) -> JSONResponse:
    try:
        args = parse_bulk_delete_args(payload)
    except ValidationError:
        return JSONResponse(
            status_code=400,
            content={
                "ok": False,
                "error_code": "INVALID_ARGS",
                "human_message": "Nenhuma nota fornecida para exclusão.",
            },
        )

    db = SessionLocal()
    try:
        deleted = bulk_delete_bookings(store=BookingStore(db), args=args)
        return JSONResponse(
            content={
                "ok": True,
                "data": {
                    "message": f"{deleted} agendamentos foram excluídos com sucesso.",
                    "deleted": deleted,
                },
            }
        )
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.post(
    "/api/backoffice/agendamentos/{nota}/concluir",
    dependencies=[Depends(require_backoffice_token)],
)
async def backoffice_concluir_agendamento(nota: str) -> JSONResponse:
    db = SessionLocal()
    try:
        booking = complete_booking(store=BookingStore(db), note_number=nota)
        return JSONResponse(
            content={
                "ok": True,
                "data": {
                    "message": "Agendamento marcado como concluído.",
                    "agendamento": serialize_booking(booking),
                },
            }
        )
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


@app.delete(
    "/api/backoffice/agendamentos/{nota}",
    dependencies=[Depends(require_backoffice_token)],
)
async def backoffice_excluir_agendamento(nota: str) -> JSONResponse:
    db = SessionLocal()
    try:
        delete_booking(store=BookingStore(db), note_number=nota)
        return JSONResponse(
            content={
                "ok": True,
                "data": {"message": f"Agendamento da nota {nota} foi excluído com sucesso."},
            }
        )
    except BookingError as exc:
        return _error_response(exc)
    finally:
        db.close()


if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
