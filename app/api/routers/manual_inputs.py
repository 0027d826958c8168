"""
app/api/routers/manual_inputs.py

Manual override persistence.

GET  /manual-inputs         current values (durable file + local store)
PUT  /manual-inputs         save to the local store
GET  /manual-inputs/export  durable JSON document download
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from app.schemas.manual_inputs import (
    ManualInputsPayload,
    ManualInputsSaveResponse,
    OverrideCountsResponse,
)
from app.services.manual_input_service import ManualInputService, get_manual_input_service
from app.storage import ManualInputStorageError
from reporting.overrides import ManualOverrideSet, count_overrides

logger = logging.getLogger(__name__)

router = APIRouter(tags=["manual-inputs"])


def _storage_failure(exc: ManualInputStorageError) -> HTTPException:
    logger.error("Manual input storage failed: %s", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/manual-inputs", response_model=ManualInputsPayload, response_model_by_alias=True)
def get_manual_inputs(
    service: ManualInputService = Depends(get_manual_input_service),
) -> ManualInputsPayload:
    try:
        overrides = service.load()
    except ManualInputStorageError as exc:
        raise _storage_failure(exc) from exc
    return ManualInputsPayload.model_validate(overrides.to_document())


@router.put("/manual-inputs", response_model=ManualInputsSaveResponse)
def put_manual_inputs(
    payload: ManualInputsPayload,
    service: ManualInputService = Depends(get_manual_input_service),
) -> ManualInputsSaveResponse:
    overrides = ManualOverrideSet.model_validate(payload.model_dump(by_alias=True))
    try:
        saved = service.save(overrides)
    except ManualInputStorageError as exc:
        raise _storage_failure(exc) from exc
    counts = count_overrides(overrides)
    return ManualInputsSaveResponse(
        saved=saved,
        counts=OverrideCountsResponse(
            existing=counts.existing,
            new_entities=counts.new_entities,
            renamed=counts.renamed,
        ),
    )


@router.get("/manual-inputs/export", summary="Download manual inputs as JSON")
def export_manual_inputs(
    service: ManualInputService = Depends(get_manual_input_service),
) -> Response:
    try:
        result = service.export(service.load())
    except ManualInputStorageError as exc:
        raise _storage_failure(exc) from exc
    logger.info(
        "Exported manual inputs existing=%d new=%d renamed=%d",
        result.counts.existing,
        result.counts.new_entities,
        result.counts.renamed,
    )
    return Response(
        content=result.to_json().encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
