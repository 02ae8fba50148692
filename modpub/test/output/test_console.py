"""Tests for modpub.output.console module."""

from __future__ import annotations

from modpub.output.console import ConsoleProtocol, MockConsole, RichConsole, Style, label_for


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.STEP) == "step"


class TestMockConsole:
    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_step(self) -> None:
        console = MockConsole()
        console.step("Building aar")
        assert console.messages == ["> Building aar"]
        assert console.count(Style.STEP) == 1

    def test_markers(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("failed")
        console.warning("careful")
        console.info("note")
        assert console.messages == ["OK done", "error: failed", "warning: careful", "info: note"]
        assert console.has_error()
        assert console.has_warning()

    def test_find_and_clear(self) -> None:
        console = MockConsole()
        console.print("Creating artifact for arm64")
        console.print("Creating artifact for x86_64")
        assert len(console.find("artifact")) == 2
        console.clear()
        assert console.text == ""


class TestProtocol:
    def test_mock_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.newline()

    def test_rich_console_prints(self, capsys) -> None:  # type: ignore[no-untyped-def]
        console = RichConsole()
        console.success("published")
        console.print("[not markup]", Style.DIM)
        out = capsys.readouterr().out
        assert "published" in out
        assert "[not markup]" in out

    def test_rich_console_keeps_table_names(self, capsys) -> None:  # type: ignore[no-untyped-def]
        console = RichConsole()
        console.error("Could not find [android] package in modpub.toml.")
        console.step("Checking [app] id")
        out = capsys.readouterr().out
        assert "Could not find [android] package" in out
        assert "Checking [app] id" in out


class TestLabels:
    def test_labelled_styles(self) -> None:
        assert label_for(Style.SUCCESS) == "OK"
        assert label_for(Style.STEP) == ">"

    def test_unlabelled_styles(self) -> None:
        assert label_for(Style.DIM) is None
        assert label_for(Style.HEADER) is None
