"""Tests for semship.output.console module."""

from __future__ import annotations

import pytest

from semship.output.console import MockConsole, RichConsole, Style


class TestMockConsole:
    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("pushed main to origin")
        console.info("nothing to release")
        console.header("acme/widget: 1.2.3 -> 1.3.0")

        assert console.messages == [
            "OK pushed main to origin",
            "info: nothing to release",
            "acme/widget: 1.2.3 -> 1.3.0",
        ]
        assert not console.has_error()

    def test_error_and_find(self) -> None:
        console = MockConsole()
        console.print("abc1234 fix: thing", Style.DIM)
        console.error("git push failed")

        assert console.has_error()
        assert [o.style for o in console.find("push")] == [Style.ERROR]
        assert "abc1234 fix: thing" in console.text


class TestRichConsole:
    def test_markup_in_messages_is_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.success("docs(changelog): 1.0.0 [skip ci]")
        console.print("chore: [bold]x[/bold]")

        out = capsys.readouterr().out
        assert "[skip ci]" in out
        assert "[bold]x[/bold]" in out

    def test_errors_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("GITHUB_TOKEN is not set")

        captured = capsys.readouterr()
        assert "error: GITHUB_TOKEN is not set" in captured.err
        assert captured.out == ""
