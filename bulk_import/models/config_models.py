from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

"""Config dataclasses for the bulk import tool.

Two groups live here:

- import profiles: the declared column-alias table, shared parameters and
  endpoint of one importable entity (doctors, specialties)
- runtime configuration loaded from ``config/import.yml`` by
  ``bulk_import.config.loader``
"""

DEFAULT_BATCH_SIZE = 50
DEFAULT_PACING_DELAY_MS = 300
DEFAULT_TIMEOUT_SECONDS = 100.0


@dataclass(frozen=True)
class ColumnAlias:
    """One entry of a profile's column-alias resolution table.

    ``headers`` are tried in order; the first header whose cell is not blank
    provides the value. The first header is the canonical one written to the
    download template.
    """
    field: str  # payload key sent to the endpoint
    headers: tuple[str, ...]  # e.g. ("Nombre", "name")
    default: str | None = ""  # used when no alias yields a value (None = omit)

    @property
    def canonical_header(self) -> str:
        return self.headers[0]


@dataclass(frozen=True)
class SharedParameter:
    """Foreign-key / context value applied to every record of an import."""
    name: str  # payload key, e.g. "country_id"
    label: str
    multiple: bool = False  # list of ids (e.g. specialties)
    required: bool = True


@dataclass(frozen=True)
class ImportProfile:
    """Everything the pipeline needs to know about one importable entity."""
    entity: str  # "doctors"
    label: str
    endpoint: str  # bulk create path, relative to the API base URL
    payload_key: str  # request body key wrapping the record list
    columns: tuple[ColumnAlias, ...]
    parameters: tuple[SharedParameter, ...] = ()
    template_sheet: str = "Sheet1"
    template_rows: tuple[dict[str, str], ...] = ()  # keyed by canonical header

    @property
    def template_file(self) -> str:
        return f"plantilla_{self.entity}.xlsx"

    def parameter(self, name: str) -> SharedParameter | None:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def missing_parameters(self, values: dict[str, Any]) -> list[str]:
        """Names of required shared parameters that have no usable value."""
        missing = []
        for p in self.parameters:
            if not p.required:
                continue
            value = values.get(p.name)
            if value is None or (p.multiple and len(value) == 0):
                missing.append(p.name)
        return missing


@dataclass(frozen=True)
class ApiConfig:
    """Submission endpoint connection settings.

    ``API_BASE_URL`` / ``API_TOKEN`` environment variables take precedence
    over the YAML values (see loader.resolve_api_config).
    """
    base_url: str | None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    token: str | None = None


@dataclass(frozen=True)
class UploadConfig:
    batch_size: int = DEFAULT_BATCH_SIZE
    pacing_delay_ms: int = DEFAULT_PACING_DELAY_MS

    @property
    def pacing_delay(self) -> float:
        """Pacing delay in seconds."""
        return self.pacing_delay_ms / 1000


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    api: ApiConfig
    upload: UploadConfig = field(default_factory=UploadConfig)
    logs_directory: Path = Path("./logs")
    profile_overrides: dict[str, UploadConfig] = field(default_factory=dict)

    def upload_for(self, entity: str) -> UploadConfig:
        return self.profile_overrides.get(entity, self.upload)
