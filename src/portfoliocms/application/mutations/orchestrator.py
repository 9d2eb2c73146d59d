"""Attachment-coupled mutation pipeline.

Keeps the blob store and the document store consistent without a shared
transaction:

    VALIDATING -> UPLOADING (optional) -> PERSISTING -> DONE
                        \\                   \\
                         +----> COMPENSATING -> FAILED

An upload that is not committed into a record is deleted again before the
original failure is handed back to the caller.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger
from pydantic import BaseModel

from portfoliocms.application.attachments import AttachmentPolicy
from portfoliocms.application.errors import ClassifiedError, classify
from portfoliocms.application.mutations.inputs import require_record_id
from portfoliocms.application.mutations.strategies import EntityStrategy
from portfoliocms.application.ports.blob_store import BlobStore
from portfoliocms.application.ports.document_store import DocumentRecord
from portfoliocms.domain.entities.attachment import (
    AttachmentInput,
    CompensationIntent,
    UploadResult,
    folder_from_url,
    public_id_from_url,
)
from portfoliocms.domain.errors import NotFoundError, ValidationError
from portfoliocms.domain.models import EntityKind, MutationKind


@dataclass(frozen=True)
class MutationRequest:
    kind: MutationKind
    entity: EntityKind
    payload: Mapping[str, Any] = field(default_factory=dict)
    attachment: Optional[AttachmentInput] = None
    record_id: Optional[str] = None


async def _settle(func: Callable[..., Any], *args: Any) -> tuple[asyncio.Future, bool]:
    """Run a blocking call in the threadpool until it has an outcome.

    Returns the finished future and whether the caller was cancelled while
    waiting. A cancelled caller still waits for the call to finish so the
    outcome of an upload or write is never lost.
    """
    future = asyncio.ensure_future(run_in_threadpool(func, *args))
    try:
        await asyncio.shield(future)
    except asyncio.CancelledError:
        # Repeated cancellation must not abandon the call
        while not future.done():
            try:
                await asyncio.wait({future})
            except asyncio.CancelledError:
                pass
        return future, True
    except Exception:
        # Outcome stays on the future
        pass
    return future, False


def _succeeded(future: asyncio.Future) -> bool:
    return not future.cancelled() and future.exception() is None


class MutationOrchestrator:
    """Runs create, update and delete for every registered entity."""

    def __init__(
        self,
        blob_store: BlobStore,
        strategies: Mapping[EntityKind, EntityStrategy],
        attachment_policy: AttachmentPolicy | None = None,
    ):
        self.blob_store = blob_store
        self.strategies = dict(strategies)
        self.attachment_policy = attachment_policy or AttachmentPolicy()

    def strategy_for(self, entity: EntityKind) -> EntityStrategy:
        try:
            return self.strategies[entity]
        except KeyError:
            raise ValidationError(f"Unsupported entity: {entity}") from None

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def execute(self, request: MutationRequest) -> BaseModel:
        """Run one create/update; raises ClassifiedError on any failure."""
        try:
            return await self._execute(request)
        except ClassifiedError:
            raise
        except Exception as e:
            response = classify(e)
            logger.info(
                f"{request.kind.value} {request.entity.value} failed: "
                f"{response.status} {response.message}"
            )
            raise ClassifiedError(response) from e

    async def delete(self, entity: EntityKind, record_id: str) -> BaseModel:
        """Delete a record, then its attachment; raises ClassifiedError on failure."""
        try:
            return await self._delete(entity, record_id)
        except ClassifiedError:
            raise
        except Exception as e:
            response = classify(e)
            logger.info(f"delete {entity.value} {record_id} failed: {response.status} {response.message}")
            raise ClassifiedError(response) from e

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _execute(self, request: MutationRequest) -> BaseModel:
        strategy = self.strategy_for(request.entity)

        # VALIDATING
        record_id = None
        if request.kind is MutationKind.UPDATE:
            record_id = require_record_id(request.record_id, strategy.label)
        fields = strategy.validate(request.kind, request.payload)
        self._check_attachment(strategy, request)
        await run_in_threadpool(strategy.check_conflicts, request.kind, fields, record_id)

        # UPLOADING
        intent = None
        if request.attachment is not None:
            intent = await self._upload(strategy, request.attachment)

        # PERSISTING
        document = strategy.build_document(fields, intent.upload.url if intent else None)
        try:
            record = await self._persist(strategy, request.kind, record_id, document, intent)
        except Exception:
            if intent is not None and not intent.resolved:
                await self._compensate(intent)
            raise

        if intent is not None:
            intent.discharge()
        logger.info(f"{request.kind.value} {strategy.label} {record['id']} committed")
        return strategy.present(record)

    def _check_attachment(self, strategy: EntityStrategy, request: MutationRequest) -> None:
        if request.attachment is None:
            if request.kind is MutationKind.CREATE and strategy.attachment_required:
                raise ValidationError(f"{strategy.attachment_label} is required")
            return
        if not strategy.accepts_attachment:
            raise ValidationError(f"A {strategy.label} does not accept an attachment")
        self.attachment_policy.validate(request.attachment, strategy.attachment_label)

    async def _upload(self, strategy: EntityStrategy, attachment: AttachmentInput) -> CompensationIntent:
        folder = strategy.folder
        upload, cancelled = await _settle(
            self.blob_store.upload, attachment.stream, folder, attachment.content_type
        )
        if cancelled:
            if _succeeded(upload):
                await self._compensate(CompensationIntent(UploadResult(upload.result(), folder)))
            raise asyncio.CancelledError()

        url = upload.result()
        logger.debug(f"Uploaded {strategy.attachment_label.lower()} for {strategy.label} to {folder}")
        return CompensationIntent(UploadResult(url, folder))

    async def _persist(
        self,
        strategy: EntityStrategy,
        kind: MutationKind,
        record_id: str | None,
        document: dict[str, Any],
        intent: CompensationIntent | None,
    ) -> DocumentRecord:
        if kind is MutationKind.CREATE:
            write, cancelled = await _settle(strategy.store.create, document, strategy.populate)
        else:
            write, cancelled = await _settle(strategy.store.update_by_id, record_id, document, strategy.populate)

        committed = _succeeded(write) and write.result() is not None
        if cancelled:
            if intent is not None and not committed:
                await self._compensate(intent)
            raise asyncio.CancelledError()

        record = write.result()
        if record is None:
            raise NotFoundError(f'{strategy.label.capitalize()} with id "{record_id}" not found')
        return record

    async def _compensate(self, intent: CompensationIntent) -> None:
        """Delete an upload that did not make it into a record.

        Failures are logged only; the error that triggered compensation is
        what the caller sees.
        """
        upload = intent.upload
        intent.resolved = True
        try:
            await run_in_threadpool(self.blob_store.delete, upload.public_id, upload.folder)
        except Exception as e:
            logger.error(f"Failed deleting orphaned upload {upload.public_id} in {upload.folder}: {e}")
            return
        logger.warning(f"Deleted orphaned upload {upload.public_id} in {upload.folder}")

    async def _delete(self, entity: EntityKind, record_id: str) -> BaseModel:
        strategy = self.strategy_for(entity)
        require_record_id(record_id, strategy.label)

        removal, cancelled = await _settle(strategy.store.delete_by_id, record_id)
        record = removal.result() if _succeeded(removal) else None
        if record is not None:
            await self._discard_attachment(strategy, record)
        if cancelled:
            raise asyncio.CancelledError()
        if not _succeeded(removal):
            raise removal.exception()
        if record is None:
            raise NotFoundError(f'{strategy.label.capitalize()} with id "{record_id}" not found')

        logger.info(f"Deleted {strategy.label} {record_id}")
        return strategy.present(record)

    async def _discard_attachment(self, strategy: EntityStrategy, record: Mapping[str, Any]) -> None:
        url = strategy.attachment_url(record)
        if url is None:
            return
        public_id = public_id_from_url(url)
        folder = folder_from_url(url) or strategy.folder
        if folder != strategy.folder:
            logger.warning(f"{strategy.label} attachment {public_id} is stored under {folder}, not {strategy.folder}")
        try:
            await run_in_threadpool(self.blob_store.delete, public_id, folder)
        except Exception as e:
            logger.error(f"Failed deleting {strategy.label} attachment {public_id} after delete: {e}")
