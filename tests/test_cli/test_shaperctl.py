"""Tests for the shaperctl CLI."""

from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from shaper.cli.main import _run_cli_command, app
from shaper.errors import ProfileNotFoundError
from shaper.store.loader import default_content_id
from conftest import MACHINE_UUID, write_file


runner = CliRunner()


@patch("shaper.cli.main.console")
def test_run_cli_command_error(mock_console, tmp_path):
    """Test the CLI command runner when a ShaperError is raised."""
    async def handler(service, **kwargs):
        raise ProfileNotFoundError("profile default/x not found")
        
    with pytest.raises(typer.Exit) as exc_info:
        _run_cli_command(handler, tmp_path, name="x")
        
    mock_console.print.assert_called_once_with("[red]Error:[/red] profile default/x not found", soft_wrap=True)
    assert exc_info.value.exit_code == 1


def test_run_cli_command_passes_service(tmp_path):
    seen = MagicMock()
    
    async def handler(service, **kwargs):
        seen(service, **kwargs)
        
    _run_cli_command(handler, tmp_path, name="x")
    
    service = seen.call_args.args[0]
    assert service.config.engine.namespace == "default"
    assert seen.call_args.kwargs == {"name": "x"}


def test_render(config_dir):
    result = runner.invoke(app, [
        "render", "--uuid", str(MACHINE_UUID), "--buildarch", "x86_64", "--config-dir", str(config_dir),
    ])
    
    assert result.exit_code == 0
    assert "kernel vmlinuz" in result.stdout
    assert f"/content/{default_content_id('lab', 'coreos', 'ignition')}" in result.stdout


def test_render_unassigned(tmp_path):
    result = runner.invoke(app, ["render", "--buildarch", "x86_64", "--config-dir", str(tmp_path)])
    
    assert result.exit_code == 1
    assert "Error:" in result.stdout


def test_content(config_dir):
    content_id = default_content_id("lab", "coreos", "ignition")
    result = runner.invoke(app, ["content", str(content_id), "--config-dir", str(config_dir)])
    
    assert result.exit_code == 0
    assert "{}" in result.stdout


def test_content_invalid_id(config_dir):
    result = runner.invoke(app, ["content", "not-a-uuid", "--config-dir", str(config_dir)])
    
    assert result.exit_code == 1
    assert "invalid content id" in result.stdout


def test_bootstrap(tmp_path):
    result = runner.invoke(app, ["bootstrap", "--config-dir", str(tmp_path)])
    
    assert result.exit_code == 0
    assert "chain ipxe?uuid=${uuid}&buildarch=${buildarch:uristring}" in result.stdout


def test_validate(config_dir):
    result = runner.invoke(app, ["validate", "--config-dir", str(config_dir)])
    
    assert result.exit_code == 0
    assert "Configuration is valid" in result.stdout
    assert "coreos" in result.stdout
    assert "node-1" in result.stdout


def test_validate_reports_errors(config_dir):
    write_file(config_dir / "assignments" / "bad.yaml", """\
        bad:
          profile_name: coreos
          is_default: true
          subject_selectors:
            uuid_list: ["7f1c0d5e-6a0b-4c43-9d7e-2b9f0c5a8e11"]
        """)
    result = runner.invoke(app, ["validate", "--config-dir", str(config_dir)])
    
    assert result.exit_code == 1
    assert "Configuration is invalid" in result.stdout
    assert "bad.yaml" in result.stdout
