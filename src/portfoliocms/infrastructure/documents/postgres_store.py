"""JSONB-backed document store, one table per collection."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import psycopg
from loguru import logger
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from portfoliocms.application.ports.document_store import DocumentRecord
from portfoliocms.domain.errors import DocumentValidationError, DuplicateKeyError, FieldError
from portfoliocms.infrastructure.documents.schemas import ALL_SCHEMAS, CollectionSchema, FieldSpec
from portfoliocms.infrastructure.postgres_client import PostgresClientWrapper

_SCHEMAS_BY_NAME = {schema.collection: schema for schema in ALL_SCHEMAS}


class _CastFailure(Exception):
    pass


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _cast_scalar(spec: FieldSpec, value: Any) -> Any:
    if spec.type == "string":
        return str(value).strip()
    if spec.type == "number":
        if isinstance(value, bool):
            raise _CastFailure(f"Cast to Number failed for value {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise _CastFailure(f"Cast to Number failed for value {value!r}") from None
        return int(number) if number.is_integer() else number
    if spec.type == "date":
        if isinstance(value, datetime):
            return value.isoformat()
        try:
            return datetime.fromisoformat(str(value)).isoformat()
        except ValueError:
            raise _CastFailure(f"Cast to date failed for value {value!r}") from None
    if spec.type == "strings":
        if not isinstance(value, (list, tuple)):
            raise _CastFailure("Cast to array failed")
        return [str(item).strip() for item in value]
    raise _CastFailure(f"Unsupported field type {spec.type}")


def _decode(row: Mapping[str, Any], schema: Optional[CollectionSchema]) -> DocumentRecord:
    data = dict(row["data"])
    if schema is not None:
        for spec in schema.fields:
            if spec.type == "date" and data.get(spec.name):
                data[spec.name] = datetime.fromisoformat(data[spec.name])
    return {
        "id": str(row["id"]),
        **data,
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


class PostgresDocumentStore:
    """Create/update/delete documents of one collection.

    Writes are validated against the collection schema: required fields,
    scalar casts, and reference arrays whose elements must be record ids.
    Unknown fields are dropped.
    """

    def __init__(self, client: PostgresClientWrapper, schema: CollectionSchema):
        self.client = client
        self.schema = schema
        self.collection = schema.collection
        self._table = sql.Identifier(schema.collection)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _cast(self, payload: Mapping[str, Any], partial: bool) -> tuple[dict[str, Any], list[str]]:
        data: dict[str, Any] = {}
        unset: list[str] = []
        errors: dict[str, FieldError] = {}

        for key, value in payload.items():
            spec = self.schema.field(key)
            if spec is None:
                continue
            if value is None or (spec.type == "string" and spec.required and not str(value).strip()):
                if spec.required:
                    errors[key] = FieldError(key, "required", f"Path `{key}` is required.")
                else:
                    unset.append(key)
                continue
            if spec.type == "refs":
                data[key] = self._cast_refs(spec, value, errors)
                continue
            try:
                data[key] = _cast_scalar(spec, value)
            except _CastFailure as e:
                errors[key] = FieldError(key, "cast", str(e))

        if not partial:
            for spec in self.schema.fields:
                if spec.required and spec.name not in data and spec.name not in errors:
                    errors[spec.name] = FieldError(spec.name, "required", f"Path `{spec.name}` is required.")

        if errors:
            raise DocumentValidationError(self.collection, errors)
        return data, unset

    @staticmethod
    def _cast_refs(spec: FieldSpec, value: Any, errors: dict[str, FieldError]) -> list[str]:
        if not isinstance(value, (list, tuple)):
            errors[spec.name] = FieldError(spec.name, "cast", "Cast to [id] failed")
            return []
        ids = []
        for index, item in enumerate(value):
            parsed = _as_uuid(item)
            if parsed is None:
                path = f"{spec.name}.{index}"
                errors[path] = FieldError(path, "cast", f"Cast to id failed for value {item!r}")
                continue
            ids.append(str(parsed))
        return ids

    def _duplicate_key(self, error: psycopg.errors.UniqueViolation) -> DuplicateKeyError:
        constraint = (error.diag.constraint_name or "") if error.diag else ""
        prefix = f"{self.collection}_"
        field_name = constraint[len(prefix):-len("_key")] if constraint.startswith(prefix) else "id"
        return DuplicateKeyError(self.collection, field_name or "id")

    # ------------------------------------------------------------------
    # Population of reference arrays
    # ------------------------------------------------------------------

    def _populate(self, cur: psycopg.Cursor, records: list[DocumentRecord]) -> None:
        for spec in self.schema.references:
            wanted = {ref for record in records for ref in record.get(spec.name, [])}
            if not wanted:
                continue
            cur.execute(
                sql.SQL("SELECT id, data, created_at, updated_at FROM {table} WHERE id = ANY(%s)").format(
                    table=sql.Identifier(spec.ref)
                ),
                ([uuid.UUID(ref) for ref in wanted],),
            )
            found = {str(row["id"]): _decode(row, _SCHEMAS_BY_NAME.get(spec.ref)) for row in cur.fetchall()}
            for record in records:
                # Dangling references are left out
                record[spec.name] = [found[ref] for ref in record.get(spec.name, []) if ref in found]

    def _fetch(self, query: sql.Composable, params: tuple, populate: bool = False) -> list[DocumentRecord]:
        with self.client.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                records = [_decode(row, self.schema) for row in cur.fetchall()]
                if populate and records:
                    self._populate(cur, records)
        return records

    def _select(self, where: str = "") -> sql.Composed:
        return sql.SQL("SELECT id, data, created_at, updated_at FROM {table} " + where).format(table=self._table)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, payload: Mapping[str, Any], populate: bool = False) -> DocumentRecord:
        """Insert a new document and return it with id and timestamps.

        Raises:
            DocumentValidationError: if a field violates the schema.
            DuplicateKeyError: if a unique field already holds the value.
        """
        data, _ = self._cast(payload, partial=False)
        now = datetime.now(timezone.utc)
        query = sql.SQL(
            """
            INSERT INTO {table} (id, data, created_at, updated_at)
            VALUES (%s, %s, %s, %s)
            RETURNING id, data, created_at, updated_at
            """
        ).format(table=self._table)
        try:
            records = self._fetch(query, (uuid.uuid4(), Jsonb(data), now, now), populate)
        except psycopg.errors.UniqueViolation as e:
            raise self._duplicate_key(e) from e
        logger.debug(f"Created {self.collection} {records[0]['id']}")
        return records[0]

    def update_by_id(
        self,
        record_id: str,
        payload: Mapping[str, Any],
        populate: bool = False,
    ) -> Optional[DocumentRecord]:
        """Apply a partial update; ``None`` when no document has this id.

        Fields set to ``None`` are removed from the document.
        """
        parsed = _as_uuid(record_id)
        if parsed is None:
            return None
        data, unset = self._cast(payload, partial=True)
        query = sql.SQL(
            """
            UPDATE {table}
            SET data = (data || %s) - %s::text[],
                updated_at = %s
            WHERE id = %s
            RETURNING id, data, created_at, updated_at
            """
        ).format(table=self._table)
        try:
            records = self._fetch(query, (Jsonb(data), unset, datetime.now(timezone.utc), parsed), populate)
        except psycopg.errors.UniqueViolation as e:
            raise self._duplicate_key(e) from e
        return records[0] if records else None

    def delete_by_id(self, record_id: str) -> Optional[DocumentRecord]:
        """Remove a document and return it; ``None`` when no document has this id."""
        parsed = _as_uuid(record_id)
        if parsed is None:
            return None
        query = sql.SQL("DELETE FROM {table} WHERE id = %s RETURNING id, data, created_at, updated_at").format(
            table=self._table
        )
        records = self._fetch(query, (parsed,))
        return records[0] if records else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, record_id: str, populate: bool = False) -> Optional[DocumentRecord]:
        parsed = _as_uuid(record_id)
        if parsed is None:
            return None
        records = self._fetch(self._select("WHERE id = %s"), (parsed,), populate)
        return records[0] if records else None

    def find_all(self, populate: bool = False) -> list[DocumentRecord]:
        return self._fetch(self._select("ORDER BY created_at DESC"), (), populate)

    def find_one(self, filter: Mapping[str, Any]) -> Optional[DocumentRecord]:
        records = self._fetch(self._select("WHERE data @> %s LIMIT 1"), (Jsonb(dict(filter)),))
        return records[0] if records else None
