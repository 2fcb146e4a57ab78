from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.config_models import ImportProfile

"""Download template: canonical headers plus a few example rows."""


def build_template(profile: ImportProfile) -> pd.DataFrame:
    headers = [c.canonical_header for c in profile.columns]
    rows = [[example.get(h, "") for h in headers] for example in profile.template_rows]
    return pd.DataFrame(rows, columns=headers)


def write_template(profile: ImportProfile, path: Path | None = None) -> Path:
    """Write the profile's template workbook and return its path.

    Defaults to ``plantilla_<entity>.xlsx`` in the current directory.
    """
    target = path if path is not None else Path(profile.template_file)
    if target.parent != Path("."):
        target.parent.mkdir(parents=True, exist_ok=True)
    df = build_template(profile)
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=profile.template_sheet, index=False)
    return target
