import importlib
from pathlib import Path

import smb_invoicing

HEADER = (
    "# SMB Invoicing - Invoicing & CRM client for SMBs\n"
    "# Copyright (c) 2026 The SMB Invoicing authors\n"
    "# Licensed under the MIT License. See LICENSE file for details.\n"
)


def test_all_lists_every_module() -> None:
    """Every module of the package is exported and importable."""
    package_dir = Path(smb_invoicing.__file__).parent
    modules = sorted(p.stem for p in package_dir.glob("*.py") if p.stem != "__init__")

    assert sorted(smb_invoicing.__all__) == modules
    for name in smb_invoicing.__all__:
        importlib.import_module(f"smb_invoicing.{name}")


def test_source_files_carry_the_project_header() -> None:
    package_dir = Path(smb_invoicing.__file__).parent
    for path in package_dir.glob("*.py"):
        assert path.read_text(encoding="utf-8").startswith(HEADER), path.name
