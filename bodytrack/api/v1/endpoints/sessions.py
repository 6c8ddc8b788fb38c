"""Edit session endpoints: open, edit field by field, validate, submit, cancel."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from bodytrack.api.deps import api_error_to_http, get_measurements_client
from bodytrack.core.constants import DRAFT_FIELDS
from bodytrack.core.enums import SessionMode
from bodytrack.schemas.measurement import MeasurementRecord
from bodytrack.schemas.session import (
    FieldUpdate,
    SessionOpen,
    SessionRead,
    ValidationResultRead,
)
from bodytrack.services.edit_session import MeasurementEditSession
from bodytrack.services.measurements_client import MeasurementsAPIError, MeasurementsClient
from bodytrack.services.session_store import SessionStore, get_session_store

logger = logging.getLogger(__name__)
router = APIRouter()


def _session_read(session_id: uuid.UUID, session: MeasurementEditSession) -> SessionRead:
    field_errors = {}
    for name in DRAFT_FIELDS:
        error = session.field_error(name)
        if error:
            field_errors[name] = error
    return SessionRead(
        id=session_id,
        mode=session.mode,
        measurement_id=session.baseline.id if session.baseline else None,
        draft=session.draft,
        modified_fields=sorted(session.diff()),
        touched_fields=sorted(session.touched),
        field_errors=field_errors,
    )


def _get_session(store: SessionStore, session_id: uuid.UUID) -> MeasurementEditSession:
    try:
        return store.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Edit session not found")


@router.post("", response_model=SessionRead, status_code=201)
def open_session(
    payload: SessionOpen,
    store: SessionStore = Depends(get_session_store),
    client: MeasurementsClient = Depends(get_measurements_client),
):
    """Open a session: empty (log a new measurement) or from a stored one (edit)."""
    baseline = None
    if payload.measurement_id is not None:
        try:
            baseline = client.get_measurement(payload.measurement_id)
        except MeasurementsAPIError as e:
            raise api_error_to_http(e)
    session_id, session = store.open(baseline)
    logger.info("Edit session %s opened (%s)", session_id, session.mode.value)
    return _session_read(session_id, session)


@router.get("/{session_id}", response_model=SessionRead)
def get_session(session_id: uuid.UUID, store: SessionStore = Depends(get_session_store)):
    return _session_read(session_id, _get_session(store, session_id))


@router.patch("/{session_id}/fields", response_model=SessionRead)
def set_field(
    session_id: uuid.UUID,
    payload: FieldUpdate,
    store: SessionStore = Depends(get_session_store),
):
    """Apply one form input to the draft."""
    session = _get_session(store, session_id)
    try:
        session.set_field(payload.field, payload.value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _session_read(session_id, session)


@router.post("/{session_id}/reset", response_model=SessionRead)
def reset_session(session_id: uuid.UUID, store: SessionStore = Depends(get_session_store)):
    session = _get_session(store, session_id)
    session.reset()
    return _session_read(session_id, session)


@router.post("/{session_id}/validate", response_model=ValidationResultRead)
def validate_session(session_id: uuid.UUID, store: SessionStore = Depends(get_session_store)):
    result = _get_session(store, session_id).validate()
    return ValidationResultRead(is_valid=result.is_valid, errors=result.errors)


@router.get("/{session_id}/diff", response_model=list[str])
def session_diff(session_id: uuid.UUID, store: SessionStore = Depends(get_session_store)):
    return sorted(_get_session(store, session_id).diff())


@router.get("/{session_id}/payload")
def session_payload(session_id: uuid.UUID, store: SessionStore = Depends(get_session_store)):
    """The request body submit would send."""
    return _get_session(store, session_id).to_request_payload()


@router.post("/{session_id}/submit", response_model=MeasurementRecord)
def submit_session(
    session_id: uuid.UUID,
    store: SessionStore = Depends(get_session_store),
    client: MeasurementsClient = Depends(get_measurements_client),
):
    """Validate, then create or update through the remote API.

    Success closes the session. Validation or API failures leave it open for correction.
    The session is out of the store while the remote call runs, so a concurrent
    submit or edit of the same session gets 404.
    """
    try:
        session = store.claim(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Edit session not found")

    result = session.validate()
    if not result.is_valid:
        store.restore(session_id, session)
        raise HTTPException(status_code=422, detail={"errors": result.errors})

    payload = session.to_request_payload()
    try:
        if session.mode is SessionMode.CREATE:
            record = client.create_measurement(payload)
        else:
            record = client.update_measurement(session.baseline.id, payload)
    except MeasurementsAPIError as e:
        store.restore(session_id, session)
        logger.warning("Edit session %s submit failed: %s", session_id, e.message)
        raise api_error_to_http(e)
    except Exception:
        store.restore(session_id, session)
        raise

    logger.info("Edit session %s submitted -> measurement %s", session_id, record.id)
    return record


@router.delete("/{session_id}", status_code=204)
def discard_session(session_id: uuid.UUID, store: SessionStore = Depends(get_session_store)):
    """Cancel editing."""
    if not store.discard(session_id):
        raise HTTPException(status_code=404, detail="Edit session not found")
