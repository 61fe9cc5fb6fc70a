from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml
from click.testing import CliRunner
from rich.console import Console

from kotlin_docs_chatbot import cli as cli_module
from kotlin_docs_chatbot.chatbot import NO_CONTEXT_MESSAGE, AnswerFailure, AnswerSuccess
from kotlin_docs_chatbot.cli import cli
from kotlin_docs_chatbot.config import ChatbotConfig
from kotlin_docs_chatbot.errors import ErrorKind
from kotlin_docs_chatbot.rag import ConfidenceLevel, ProcessingFailure, ProcessingSuccess


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "chatbot.yaml"
    raw = {
        "llm": {"provider": "ollama", "providers": {"ollama": {"model": "llama3.1:8b"}}},
        "vector_store": {"persist_directory": str(tmp_path / "chroma")},
        "logging": {"level": "WARNING"},
    }
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return path


@pytest.fixture
def runtime(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    fake = MagicMock()
    fake.config = ChatbotConfig.from_file(config_path)
    monkeypatch.setattr(cli_module, "load_runtime_from_path", lambda path: fake)
    return fake


def test_cli_help_displays_commands() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("ask", "ingest", "serve", "info", "doctor", "reset-vector-store"):
        assert command in result.output


def test_info_prints_descriptor(config_path: Path) -> None:
    result = CliRunner().invoke(cli, ["info", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "Kotlin Expert Chatbot" in result.output


def test_ask_prints_answer(runtime: MagicMock, config_path: Path) -> None:
    runtime.chatbot.ask.return_value = AnswerSuccess("Use the data keyword.", ConfidenceLevel.LOW, 1, 42)

    result = CliRunner().invoke(
        cli,
        ["ask", "--config", str(config_path), "--skip-ollama-check", "What is a data class?"],
    )

    assert result.exit_code == 0
    assert "Use the data keyword." in result.output
    assert "LOW" in result.output
    runtime.chatbot.ask.assert_called_once_with("What is a data class?")


def test_ask_failure_exits_non_zero(runtime: MagicMock, config_path: Path) -> None:
    runtime.chatbot.ask.return_value = AnswerFailure(NO_CONTEXT_MESSAGE, ErrorKind.NO_CONTEXT, 3)

    result = CliRunner().invoke(cli, ["ask", "--config", str(config_path), "--skip-ollama-check", "Bread?"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_ask_aborts_when_ollama_is_down(
    runtime: MagicMock, config_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli_module, "check_ollama_connection", lambda base_url: False)

    result = CliRunner().invoke(cli, ["ask", "--config", str(config_path), "What is a data class?"])

    assert result.exit_code != 0
    assert "Ollama is not running" in result.output
    runtime.chatbot.ask.assert_not_called()


def test_ingest_reports_each_file(
    runtime: MagicMock, config_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    test_console = Console(record=True, width=200)
    monkeypatch.setattr(cli_module, "console", test_console)
    runtime.ingestion.ingest_path.side_effect = [
        ProcessingSuccess(3, 12, 50),
        ProcessingFailure(2, "Document not found"),
    ]
    runtime.vector_store.count.return_value = 12

    result = CliRunner().invoke(
        cli,
        ["ingest", "--config", str(config_path), str(tmp_path / "a.pdf"), str(tmp_path / "b.pdf")],
    )

    assert result.exit_code == 1
    output = test_console.export_text()
    assert "12 chunk(s)" in output
    assert "Document not found" in output
    assert runtime.ingestion.ingest_path.call_count == 2


def test_doctor_renders_results(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli_module,
        "run_diagnostics",
        lambda config: {"python": {"status": "ok", "details": "Python 3.12 detected."}},
    )

    result = CliRunner().invoke(cli, ["doctor", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "Python 3.12 detected." in result.output


def test_doctor_fails_on_error(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli_module,
        "run_diagnostics",
        lambda config: {"ollama": {"status": "error", "details": "Ollama not reachable."}},
    )

    result = CliRunner().invoke(cli, ["doctor", "--config", str(config_path)])

    assert result.exit_code == 1


def test_reset_without_local_store_is_a_no_op(config_path: Path) -> None:
    result = CliRunner().invoke(cli, ["reset-vector-store", "--config", str(config_path), "--force"])

    assert result.exit_code == 0
    assert "Nothing to reset" in result.output


def test_reset_can_be_cancelled(config_path: Path, tmp_path: Path) -> None:
    (tmp_path / "chroma").mkdir()

    result = CliRunner().invoke(cli, ["reset-vector-store", "--config", str(config_path)], input="n\n")

    assert result.exit_code == 0
    assert "Reset cancelled" in result.output


def test_render_answer_shows_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    test_console = Console(record=True, width=120)
    monkeypatch.setattr(cli_module, "console", test_console)

    cli_module.render_answer(AnswerSuccess("Sealed classes restrict hierarchies.", ConfidenceLevel.MEDIUM, 2, 7))

    output = test_console.export_text()
    assert "Sealed classes restrict hierarchies." in output
    assert "MEDIUM" in output
    assert "Kotlin Expert" in output
