"""Parametrized --help and --examples tests for every command."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from catgen.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--help"], ["generate", "generators", "show", "versions", "version", "--catalog"]),
    (["generate", "--help"], ["NAME", "--option", "KEY=VALUE"]),
    (["generators", "--help"], ["plugins"]),
    (["show", "--help"], ["KIND", "RESOURCE_ID", "--version"]),
    (["versions", "--help"], ["KIND", "RESOURCE_ID"]),
    (["version", "--help"], ["KIND", "RESOURCE_ID", "versioned/"]),
]

EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["catgen --catalog docs/catalog generate manifest"]),
    (["generate", "--examples"], ["catgen generate manifest", "include_all_versions=true"]),
    (["generators", "--examples"], ["catgen --json generators"]),
    (["show", "--examples"], ["--version 0.9.0"]),
    (["versions", "--examples"], ["catgen versions event order-created"]),
    (["version", "--examples"], ["catgen version event order-created"]),
]


@pytest.mark.parametrize(
    ("args", "keywords"), HELP_COMMANDS, ids=[" ".join(a) for a, _ in HELP_COMMANDS]
)
def test_help(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    for keyword in keywords:
        assert keyword in result.output


@pytest.mark.parametrize(
    ("args", "keywords"), EXAMPLES_COMMANDS, ids=[" ".join(a) for a, _ in EXAMPLES_COMMANDS]
)
def test_examples(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    path = " ".join(["cli", *args[:-1]])
    assert f"Examples for '{path}'" in result.output
    for keyword in keywords:
        assert keyword in result.output
