"""CLI tests for the run and render commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import prescription_bot.main as main_module
import prescription_bot.workflow as workflow_module
from prescription_bot.config import ENV_TIMEOUT, ENV_TOKEN, Settings
from prescription_bot.converter import WeasyPrintConverter, WkhtmltopdfConverter
from .conftest import FAKE_PDF, FakeConverter


@pytest.fixture
def payload_file(tmp_path: Path, payload) -> Path:
    path = tmp_path / "aspirin.json"
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_render_html(payload_file: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(main_module.app, ["render", str(payload_file), "--html"])

    assert result.exit_code == 0
    markup = payload_file.with_suffix(".html").read_text(encoding="utf-8")
    assert "Aspirin" in markup
    assert "31.01.2024" in markup


def test_render_pdf_uses_selected_engine(payload_file: Path, tmp_path: Path, monkeypatch) -> None:
    converter = FakeConverter()
    engines: list[str] = []

    def fake_build_converter(engine: str, **kwargs) -> FakeConverter:
        engines.append(engine)
        return converter

    monkeypatch.setattr(main_module, "build_converter", fake_build_converter)
    output = tmp_path / "out.pdf"

    runner = CliRunner()
    result = runner.invoke(
        main_module.app,
        ["render", str(payload_file), "--output", str(output), "--engine", "wkhtmltopdf"],
    )

    assert result.exit_code == 0
    assert engines == ["wkhtmltopdf"]
    assert output.read_bytes() == FAKE_PDF
    assert "31.01.2024" in converter.calls[0]


def test_render_rejects_bad_date(tmp_path: Path, payload) -> None:
    payload["Date"] = "2024-01-01"
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(main_module.app, ["render", str(path), "--html"])

    assert result.exit_code == 1
    assert "Could not render" in result.output
    assert not path.with_suffix(".html").exists()


def test_render_rejects_malformed_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(main_module.app, ["render", str(path), "--html"])

    assert result.exit_code == 1


def test_run_without_token_exits(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_TOKEN, "")
    monkeypatch.chdir(tmp_path)

    called: list[Settings] = []
    monkeypatch.setattr(main_module, "run_bot", lambda settings, wf: called.append(settings))

    runner = CliRunner()
    result = runner.invoke(main_module.app, ["run"])

    assert result.exit_code == 1
    assert "Startup failed" in result.output
    assert called == []


def test_run_starts_bot(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_TOKEN, "123456:TEST-token")
    monkeypatch.chdir(tmp_path)

    called: dict[str, object] = {}

    def fake_run_bot(settings: Settings, wf) -> None:
        called["settings"] = settings
        called["workflow"] = wf

    monkeypatch.setattr(main_module, "run_bot", fake_run_bot)
    monkeypatch.setattr(main_module, "configure_logging", lambda debug=False: None)

    runner = CliRunner()
    result = runner.invoke(main_module.app, ["run", "--engine", "weasyprint", "--debug"])

    assert result.exit_code == 0
    settings = called["settings"]
    assert isinstance(settings, Settings)
    assert settings.token == "123456:TEST-token"
    assert settings.debug is True
    assert isinstance(called["workflow"], workflow_module.PrescriptionWorkflow)
    assert isinstance(workflow_module.get_converter(), WeasyPrintConverter)


def test_package_exposes_workflow_module() -> None:
    import prescription_bot

    assert prescription_bot.workflow is workflow_module
    assert isinstance(prescription_bot.default_workflow, workflow_module.PrescriptionWorkflow)


def test_run_bounds_engine_below_processing_timeout(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_TOKEN, "123456:TEST-token")
    monkeypatch.setenv(ENV_TIMEOUT, "30")
    monkeypatch.chdir(tmp_path)

    called: dict[str, object] = {}

    def fake_run_bot(settings: Settings, wf) -> None:
        called["settings"] = settings

    monkeypatch.setattr(main_module, "run_bot", fake_run_bot)
    monkeypatch.setattr(main_module, "configure_logging", lambda debug=False: None)

    runner = CliRunner()
    result = runner.invoke(main_module.app, ["run", "--engine", "wkhtmltopdf"])

    assert result.exit_code == 0, result.output
    converter = workflow_module.get_converter()
    assert isinstance(converter, WkhtmltopdfConverter)
    assert converter.timeout < 30.0
    assert called["settings"].processing_timeout == 30.0
