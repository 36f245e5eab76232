from __future__ import annotations

import sys
from subprocess import run as subprocess_run  # noqa: S404

import pytest


def _help(*argv: str) -> str:
    result = subprocess_run(  # noqa: S603
        [sys.executable, "-m", "flexiforms.cli", *argv, "--help"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0
    return result.stdout


def test_cli_help_lists_commands() -> None:
    output = _help()

    assert output.lower().startswith("usage: flexiforms")
    for command in ("definitions", "seed", "validate", "--rpc", "--store-dir"):
        assert command in output


@pytest.mark.parametrize(
    ("argv", "expected"),
    [(("definitions",), "history"), (("validate",), "--entity-type")],
)
def test_subcommand_help(argv: tuple[str, ...], expected: str) -> None:
    assert expected in _help(*argv)
