"""
Mutation routes for the portfolio collections.

Every route takes a multipart form: a JSON ``payload`` field with the entity
fields and, for collections that carry one, an optional ``attachment`` file.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile
from loguru import logger
from pydantic import BaseModel

from portfoliocms.application import ClassifiedError, MutationOrchestrator, MutationRequest, classify
from portfoliocms.domain import AttachmentInput, EntityKind, MutationKind
from portfoliocms.domain.errors import ValidationError
from portfoliocms.infrastructure import get_orchestrator

router = APIRouter()


# ============================================================================
# Request helpers
# ============================================================================


def _parse_payload(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw or "{}")
    except json.JSONDecodeError:
        raise ClassifiedError(classify(ValidationError("Payload must be a JSON object"))) from None
    if not isinstance(payload, dict):
        raise ClassifiedError(classify(ValidationError("Payload must be a JSON object")))
    return payload


def _attachment(upload: UploadFile | None) -> AttachmentInput | None:
    if upload is None:
        return None
    return AttachmentInput(stream=upload.file, filename=upload.filename, content_type=upload.content_type)


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/{entity}", status_code=201, response_model=None, tags=["mutations"])
async def create_entity(
    entity: EntityKind,
    payload: str = Form("{}"),
    attachment: UploadFile | None = File(None),
    orchestrator: MutationOrchestrator = Depends(get_orchestrator),
) -> BaseModel:
    """Create a record, uploading its attachment first when one is sent."""
    logger.info(f"Create {entity.value} (attachment: {'yes' if attachment else 'no'})")
    request = MutationRequest(
        kind=MutationKind.CREATE,
        entity=entity,
        payload=_parse_payload(payload),
        attachment=_attachment(attachment),
    )
    return await orchestrator.execute(request)


@router.patch("/{entity}/{record_id}", response_model=None, tags=["mutations"])
async def update_entity(
    entity: EntityKind,
    record_id: str,
    payload: str = Form("{}"),
    attachment: UploadFile | None = File(None),
    orchestrator: MutationOrchestrator = Depends(get_orchestrator),
) -> BaseModel:
    """Partially update a record; a new attachment replaces the stored URL."""
    logger.info(f"Update {entity.value} {record_id} (attachment: {'yes' if attachment else 'no'})")
    request = MutationRequest(
        kind=MutationKind.UPDATE,
        entity=entity,
        payload=_parse_payload(payload),
        attachment=_attachment(attachment),
        record_id=record_id,
    )
    return await orchestrator.execute(request)


@router.delete("/{entity}/{record_id}", response_model=None, tags=["mutations"])
async def delete_entity(
    entity: EntityKind,
    record_id: str,
    orchestrator: MutationOrchestrator = Depends(get_orchestrator),
) -> BaseModel:
    """Delete a record and, best-effort, its attachment."""
    logger.info(f"Delete {entity.value} {record_id}")
    return await orchestrator.delete(entity, record_id)
