#!/usr/bin/env python3
"""Sample workbook generation for manual and load testing.

Generates a synthetic doctors or specialties workbook using the same Spanish
headers as the download template:
- Row 1: Header row
- Row 2+: Data rows

Every 25th doctor row gets a blank email so the endpoint has rows to reject.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

FIRST_NAMES = ["Juan", "María", "Carlos", "Ana", "Luis", "Lucía", "Jorge", "Sofía", "Pedro", "Elena"]
LAST_NAMES = ["Pérez", "García", "López", "Martínez", "Rodríguez", "Sánchez", "Ramírez", "Torres"]
FIELDS = ["Cardiología", "Pediatría", "Neurología", "Dermatología", "Oncología", "Traumatología"]


def generate_doctors(rows: int, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    first = rng.choice(FIRST_NAMES, rows)
    last = rng.choice(LAST_NAMES, rows)
    data: dict[str, list[Any]] = {
        "Nombre": [f"Dr. {f} {l}" for f, l in zip(first, last)],
        "Email": [
            "" if (j + 1) % 25 == 0 else f"doctor{j + 1}@hospital.com"
            for j in range(rows)
        ],
        "Teléfono": [f"555-{n:04d}" for n in rng.integers(0, 10_000, rows)],
        "Licencia": [f"MED-{n:05d}" for n in rng.integers(10_000, 100_000, rows)],
        "Biografía": [f"Especialista en {f.lower()}" for f in rng.choice(FIELDS, rows)],
    }
    return pd.DataFrame(data)


def generate_specialties(rows: int, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    base = rng.choice(FIELDS, rows)
    data: dict[str, list[Any]] = {
        "Nombre": [f"{b} {j + 1}" for j, b in enumerate(base)],
        "Descripción": [f"Especialidad médica de {b.lower()}" for b in base],
    }
    return pd.DataFrame(data)


GENERATORS = {
    "doctors": generate_doctors,
    "specialties": generate_specialties,
}


def create_workbook(output_path: Path, entity: str, rows: int, seed: int = 42) -> None:
    df = GENERATORS[entity](rows, seed)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False)
    print(f"Created workbook: {output_path}")
    print(f"  Entity: {entity}")
    print(f"  Rows: {rows:,} (+ 1 header row)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic bulk import workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s doctors doctors.xlsx --rows 500
  %(prog)s specialties specialties.xlsx --rows 120 --seed 7
        """,
    )
    parser.add_argument("entity", choices=sorted(GENERATORS))
    parser.add_argument("output", type=Path, help="Output Excel file path")
    parser.add_argument("--rows", type=int, default=120, help="Number of data rows (default: 120)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    try:
        create_workbook(args.output, args.entity, args.rows, args.seed)
    except OSError as e:
        print(f"Error writing workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
