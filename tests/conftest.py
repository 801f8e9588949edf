"""Shared pytest fixtures for ReciboWatch tests."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure the project root is importable
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Override config directory so tests don't touch a real settings file.
os.environ["RECIBOWATCH_CONFIG_DIR"] = tempfile.mkdtemp(prefix="recibowatch_test_cfg_")


# Two users: Ana looks up herself and Perez; Bruno looks up Perez,
# an unresolved identity and himself (date without time).
SAMPLE_LOG = """\
Pkusuario: 1 - Legajo: 100 - DNI: 111 - Nombre: Ana
DNI: 111 - Apellido: Ana - Nombre: Ana - Fecha: 01/02/2024 10:00:00
DNI: 222 - Apellido: Perez - Nombre: Luis - Fecha: 02/02/2024 11:00:00
---
Pkusuario: 2 - Legajo: 200 - DNI: 333 - Nombre: Bruno Diaz
DNI: 222 - Apellido: Perez - Nombre: Luis - Fecha: 03/02/2024 09:30:00
DNI: 444 - Apellido: Desconocido - Nombre: Desconocido - Fecha: 03/02/2024 09:45:00
DNI: 333 - Apellido: Diaz - Nombre: Bruno - Fecha: 04/02/2024
---
"""


@pytest.fixture
def sample_log() -> str:
    return SAMPLE_LOG


@pytest.fixture
def sample_log_file(tmp_path: Path) -> Path:
    """The sample log written as a UTF-8 .txt export."""
    p = tmp_path / "consultas.txt"
    p.write_text(SAMPLE_LOG, encoding="utf-8")
    return p


@pytest.fixture
def sample_analysis():
    from backend.lookups.pipeline import run_lookup_analysis
    return run_lookup_analysis(SAMPLE_LOG)
