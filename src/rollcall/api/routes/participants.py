"""Roster endpoints: listing, single add, range generation, file import, template.

Handlers that only touch the roster store are plain ``def`` so FastAPI runs
them in its threadpool; a store waiting on its writer lock never blocks the
event loop.
"""

from __future__ import annotations

import asyncio
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

from fastapi import APIRouter, File, HTTPException, Request, Response, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rollcall.core.exceptions import (
    FileStoreError,
    ImportAbortedError,
    InvalidRangeError,
    RosterStoreError,
)
from rollcall.importer.coordinator import ImportCoordinator
from rollcall.importer.sources import StoredFile
from rollcall.importer.template import TEMPLATE_FILE_NAME, build_template
from rollcall.models.import_report import Collision, ImportReport, RejectionReason
from rollcall.models.participant import Participant

router = APIRouter(tags=["participants"])


class AddParticipantRequest(BaseModel):
    employee_id: str = ""
    name: str = ""
    department: Optional[str] = None


class RangeRequest(BaseModel):
    start: int
    end: int
    prefix: Optional[str] = None


class StoredImportRequest(BaseModel):
    key: str


class UploadSource:
    """IFileSource over a multipart upload."""

    def __init__(self, upload: UploadFile) -> None:
        self._upload = upload

    @property
    def name(self) -> str:
        return self._upload.filename or ""

    @property
    def size(self) -> int | None:
        return self._upload.size

    async def read(self) -> bytes:
        return await self._upload.read()


def _coordinator(request: Request) -> ImportCoordinator:
    return request.app.state.coordinator


def _store_unavailable(exc: RosterStoreError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Roster store unavailable: {exc}")


def _collision_detail(collision: Collision) -> dict:
    detail: dict = {"reason": collision.reason.value, "value": collision.value}
    if collision.holder is not None:
        detail["holder"] = collision.holder.model_dump(mode="json")
        detail["message"] = (
            f"{collision.reason.value}: {collision.value!r} is already used by {collision.holder.name}"
        )
    return detail


def _report_response(request: Request, report: ImportReport) -> JSONResponse:
    sample = request.app.state.settings.importer.report_sample_size
    body = {"summary": report.summary(sample), "report": report.model_dump(mode="json")}
    return JSONResponse(body, status_code=422 if report.fatal else 200)


@router.get("")
def list_participants(request: Request) -> list[Participant]:
    try:
        return request.app.state.roster_store.list_participants()
    except RosterStoreError as exc:
        raise _store_unavailable(exc) from exc


@router.post("", status_code=201)
def add_participant(body: AddParticipantRequest, request: Request) -> Participant:
    try:
        result = _coordinator(request).add_participant(body.employee_id, body.name, body.department)
    except RosterStoreError as exc:
        raise _store_unavailable(exc) from exc
    if result.rejection is not None:
        status = 422 if result.rejection.reason == RejectionReason.BLANK_NAME else 409
        raise HTTPException(status_code=status, detail=_collision_detail(result.rejection))
    return result.participant


@router.post("/range", status_code=201)
def generate_range(body: RangeRequest, request: Request) -> dict:
    try:
        result = _coordinator(request).generate_range(body.start, body.end, body.prefix)
    except InvalidRangeError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RosterStoreError as exc:
        raise _store_unavailable(exc) from exc
    if result.conflict is not None:
        raise HTTPException(status_code=409, detail=_collision_detail(result.conflict))
    return {"created": len(result.created), "participants": [p.model_dump(mode="json") for p in result.created]}


@router.post("/import")
async def import_upload(request: Request, file: UploadFile = File(...)) -> JSONResponse:
    report = await _coordinator(request).import_file(UploadSource(file))
    return _report_response(request, report)


@router.post("/uploads", status_code=201)
async def store_upload(request: Request, file: UploadFile = File(...)) -> dict:
    """Keep an upload in the file store for a later ``/import/stored`` call."""
    coordinator = _coordinator(request)
    name = file.filename or ""
    raw = b""
    try:
        coordinator.precheck(name, file.size)
        raw = await file.read()
        coordinator.precheck(name, len(raw))
    except ImportAbortedError as exc:
        raise HTTPException(status_code=422, detail={"code": exc.code.value, "message": str(exc)}) from exc

    key = f"{request.app.state.settings.s3.upload_prefix}{uuid4().hex}/{name}"
    try:
        await asyncio.to_thread(
            request.app.state.file_store.write, key, raw, file.content_type or "text/csv",
        )
    except FileStoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"key": key, "size": len(raw)}


@router.post("/import/stored")
async def import_stored(body: StoredImportRequest, request: Request) -> JSONResponse:
    source = StoredFile(request.app.state.file_store, body.key)
    try:
        report = await _coordinator(request).import_file(source)
    except FileStoreError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _report_response(request, report)


@router.get("/template")
async def download_template() -> Response:
    return Response(
        content=build_template(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(TEMPLATE_FILE_NAME)}"},
    )


@router.delete("/{participant_id}", status_code=204)
def remove_participant(participant_id: str, request: Request) -> Response:
    try:
        removed = request.app.state.roster_store.remove(participant_id)
    except RosterStoreError as exc:
        raise _store_unavailable(exc) from exc
    if not removed:
        raise HTTPException(status_code=404, detail=f"Participant {participant_id!r} not found")
    return Response(status_code=204)


@router.delete("")
def clear_participants(request: Request) -> dict:
    try:
        return {"removed": request.app.state.roster_store.clear()}
    except RosterStoreError as exc:
        raise _store_unavailable(exc) from exc
