from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from ..models.config_models import ImportProfile
from ..models.import_session import ImportSession, ImportState
from ..models.processing_result import AggregateReport
from ..models.row_data import RawRow

"""Pure transition functions for ImportSession.

Every function takes a session and returns a new one, or raises a
SessionError subclass and leaves the input untouched.

    IDLE -> CONFIGURING -> PARSED -> UPLOADING -> COMPLETED
"""

__all__ = [
    "SessionError",
    "ConfigurationError",
    "NoDataError",
    "SessionStateError",
    "open_session",
    "configure",
    "toggle_parameter",
    "require_parameters",
    "guard_file_selection",
    "load_rows",
    "begin_upload",
    "record_batch",
    "complete_upload",
    "restart",
]


class SessionError(Exception):
    """Base class for rejected session transitions."""


class ConfigurationError(SessionError):
    """Shared parameters are unknown or missing."""


class NoDataError(SessionError):
    """Upload requested with no parsed records."""


class SessionStateError(SessionError):
    """Transition not allowed from the current state."""


_CONFIGURABLE = (ImportState.IDLE, ImportState.CONFIGURING, ImportState.PARSED)


def open_session(profile: ImportProfile) -> ImportSession:
    return ImportSession(profile=profile)


def _ensure_unlocked(session: ImportSession, action: str) -> None:
    if session.inputs_locked:
        raise SessionStateError(f"cannot {action} while an upload is in progress")


def _normalize(session: ImportSession, name: str, value: Any) -> Any:
    param = session.profile.parameter(name)
    if param is None:
        raise ConfigurationError(f"unknown parameter '{name}' for {session.profile.entity}")
    if not param.multiple or value is None:
        return value
    if isinstance(value, (str, int)):
        return (value,)
    return tuple(value)


def configure(session: ImportSession, **values: Any) -> ImportSession:
    """Set shared parameters.

    From PARSED the session stays PARSED and its records are re-derived from
    the stored raw rows with the new parameters.
    """
    _ensure_unlocked(session, "change parameters")
    if session.state not in _CONFIGURABLE:
        raise SessionStateError(
            f"cannot change parameters in state {session.state.value}; restart first"
        )
    params = dict(session.parameters)
    for name, value in values.items():
        params[name] = _normalize(session, name, value)
    state = ImportState.PARSED if session.state is ImportState.PARSED else ImportState.CONFIGURING
    return replace(session, parameters=params, state=state)


def toggle_parameter(session: ImportSession, name: str, value: Any) -> ImportSession:
    """Add ``value`` to a multi-valued parameter, or remove it if present."""
    param = session.profile.parameter(name)
    if param is None:
        raise ConfigurationError(f"unknown parameter '{name}' for {session.profile.entity}")
    if not param.multiple:
        raise ConfigurationError(f"parameter '{name}' takes a single value")
    current = tuple(session.parameters.get(name) or ())
    updated = tuple(v for v in current if v != value) if value in current else current + (value,)
    return configure(session, **{name: updated})


def require_parameters(session: ImportSession) -> None:
    missing = session.missing_parameters
    if missing:
        raise ConfigurationError(f"missing required parameters: {', '.join(missing)}")


def guard_file_selection(session: ImportSession) -> None:
    """Check a file may be selected now; call before decoding it."""
    _ensure_unlocked(session, "select a file")
    require_parameters(session)


def load_rows(session: ImportSession, file_name: str, raw_rows: Sequence[RawRow]) -> ImportSession:
    """Replace file, rows, report and progress; shared parameters are kept."""
    guard_file_selection(session)
    return ImportSession(
        profile=session.profile,
        state=ImportState.PARSED,
        parameters=dict(session.parameters),
        file_name=file_name,
        raw_rows=tuple(raw_rows),
    )


def begin_upload(session: ImportSession) -> ImportSession:
    if session.state is not ImportState.PARSED:
        raise SessionStateError(f"cannot upload from state {session.state.value}")
    require_parameters(session)
    if not session.records:
        raise NoDataError("no data to upload")
    return replace(
        session,
        state=ImportState.UPLOADING,
        report=AggregateReport(total_records=len(session.records)),
        progress=0,
    )


def record_batch(session: ImportSession, report: AggregateReport, progress: int) -> ImportSession:
    if session.state is not ImportState.UPLOADING:
        raise SessionStateError(f"no upload in progress (state {session.state.value})")
    return replace(session, report=report, progress=progress)


def complete_upload(session: ImportSession) -> ImportSession:
    if session.state is not ImportState.UPLOADING:
        raise SessionStateError(f"no upload in progress (state {session.state.value})")
    return replace(session, state=ImportState.COMPLETED)


def restart(session: ImportSession) -> ImportSession:
    _ensure_unlocked(session, "restart")
    return open_session(session.profile)
