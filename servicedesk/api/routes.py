from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from servicedesk.core.config import AppConfig
from servicedesk.core.errors import DuplicateTicketError, StorageError, TicketCompletedError
from servicedesk.schemas import ImportResponse, Statistics, StorageInfo, Ticket, TicketCreate, TicketPatch
from servicedesk.services import query
from servicedesk.services.tickets import TicketStore, backup_filename

router = APIRouter()
log = logger.bind(component="api")


def get_store(request: Request) -> TicketStore:
    return request.app.state.store


def get_app_settings(request: Request) -> AppConfig:
    return request.app.state.settings


def _dump(tickets: list[Ticket]) -> list[Dict[str, Any]]:
    return [ticket.model_dump(mode="json", by_alias=True) for ticket in tickets]


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/technicians")
async def technicians(settings: AppConfig = Depends(get_app_settings)) -> list[str]:
    return list(settings.technicians)


@router.post("/tickets", status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketCreate, store: TicketStore = Depends(get_store)):
    ticket = store.create(payload)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=ticket.model_dump(mode="json", by_alias=True))


@router.get("/tickets/{ticket_id}")
async def get_ticket(ticket_id: str, store: TicketStore = Depends(get_store)):
    ticket = store.get(ticket_id)
    if not ticket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    return JSONResponse(content=ticket.model_dump(mode="json", by_alias=True))


@router.patch("/tickets/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    changes: Dict[str, Any] = Body(...),
    store: TicketStore = Depends(get_store),
):
    try:
        patch = TicketPatch.model_validate(changes)
    except ValidationError as exc:
        log.warning("Invalid patch for ticket {ticket_id}: {error}", ticket_id=ticket_id, error=exc)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors(include_url=False)) from exc

    try:
        ticket = store.update(ticket_id, patch)
    except TicketCompletedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    if not ticket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    return JSONResponse(content=ticket.model_dump(mode="json", by_alias=True))


@router.delete("/tickets/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(ticket_id: str, store: TicketStore = Depends(get_store)) -> Response:
    store.remove(ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/tickets", status_code=status.HTTP_204_NO_CONTENT)
async def clear_tickets(store: TicketStore = Depends(get_store)) -> Response:
    store.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/views/technician")
async def technician_view(
    status_filter: str = Query(default="all", alias="status"),
    assignee: str = "all",
    store: TicketStore = Depends(get_store),
):
    try:
        tickets = query.technician_worklist(store.get_all(), status=status_filter, assignee=assignee)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return JSONResponse(content=_dump(tickets))


@router.get("/views/admin")
async def admin_view(
    q: str = "",
    status_filter: str = Query(default="all", alias="status"),
    assignee: str = "all",
    date_from: str | None = None,
    date_to: str | None = None,
    store: TicketStore = Depends(get_store),
    settings: AppConfig = Depends(get_app_settings),
):
    try:
        tickets = query.admin_table(
            store.get_all(),
            query=q,
            status=status_filter,
            assignee=assignee,
            date_from=date_from,
            date_to=date_to,
            tz=settings.timezone,
        )
    except ValueError as exc:
        log.warning("Invalid admin filter: {error}", error=exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return JSONResponse(content=_dump(tickets))


@router.get("/statistics")
async def statistics(store: TicketStore = Depends(get_store)):
    stats: Statistics = query.compute_statistics(store.get_all())
    return JSONResponse(content=stats.model_dump(mode="json", by_alias=True))


@router.get("/storage")
async def storage_info(store: TicketStore = Depends(get_store)):
    info: StorageInfo = store.storage_info()
    return JSONResponse(content=info.model_dump(mode="json", by_alias=True))


@router.get("/backup")
async def export_backup(store: TicketStore = Depends(get_store)) -> Response:
    return Response(
        content=store.export_snapshot(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("/backup")
async def import_backup(request: Request, store: TicketStore = Depends(get_store)):
    body = await request.body()
    if not store.import_snapshot(body):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Backup file is not a valid ticket snapshot")
    resp = ImportResponse(total_tickets=len(store.get_all()))
    return JSONResponse(content=resp.model_dump(mode="json", by_alias=True))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DuplicateTicketError)
    async def _duplicate(_: Request, exc: DuplicateTicketError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage(_: Request, exc: StorageError) -> JSONResponse:
        log.error("Storage failure: {error}", error=exc)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})
