"""Tests for the command-line entry point (backend replaced by a scripted one)."""

import pytest
from conftest import (
    ScriptedLLM,
    reply,
    tool_call,
)

from fanout import main as entry
from fanout.core.errors import LLMResponseError


def test_main_prints_final_result(monkeypatch, tmp_path, capsys) -> None:
    llm = ScriptedLLM([reply("", tool_call("complete_task", '{"result": "all done"}'))])
    monkeypatch.setattr(entry, "load_llm", lambda *args, **kwargs: llm)

    entry.main(["summarize the topic", "--log-dir", str(tmp_path / "logs")])

    assert "all done" in capsys.readouterr().out
    assert (tmp_path / "logs" / "orchestrator.md").exists()


def test_main_exits_non_zero_with_error_class(monkeypatch, tmp_path, capsys) -> None:
    class _Broken(ScriptedLLM):
        async def complete(self, request):
            raise LLMResponseError("choices is empty")

    monkeypatch.setattr(entry, "load_llm", lambda *args, **kwargs: _Broken())

    with pytest.raises(SystemExit) as excinfo:
        entry.main(["task", "--log-dir", str(tmp_path)])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "LLMResponseError: No usable response from llm: choices is empty" in err
