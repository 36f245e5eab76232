from __future__ import annotations

import json
import sys
from subprocess import run as subprocess_run  # noqa: S404
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def _cli(store_dir: Path, *argv: str) -> tuple[int, str]:
    result = subprocess_run(  # noqa: S603
        [sys.executable, "-m", "flexiforms.cli", "--store-dir", str(store_dir), *argv],
        capture_output=True,
        text=True,
        check=False,
    )
    return result.returncode, result.stdout


def test_seed_then_validate_records(tmp_path: Path) -> None:
    store_dir = tmp_path / "forms"

    code, out = _cli(store_dir, "seed")
    assert code == 0
    assert json.loads(out) == ["customers", "products", "orders"]

    good = tmp_path / "good.json"
    good.write_text(json.dumps({"articleNumber": "P-1", "name": "Bolt", "price": "0.25"}), encoding="utf-8")
    code, out = _cli(store_dir, "validate", "--entity-type", "products", "--data", str(good))
    assert code == 0
    assert json.loads(out) == {"valid": True}

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"articleNumber": "P-1", "name": "Bolt", "price": ""}), encoding="utf-8")
    code, out = _cli(store_dir, "validate", "--entity-type", "products", "--data", str(bad))
    assert code == 1
    assert json.loads(out)["message"] == "Price is required"
