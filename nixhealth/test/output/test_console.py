"""Tests for nixhealth.output.console module."""

from __future__ import annotations

import io

from nixhealth.output.console import ConsoleProtocol, Line, MockConsole, RichConsole, Style


def test_style_str() -> None:
    assert str(Style.ADVISORY) == "advisory"


class TestMockConsole:
    def test_print_records_line(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.lines == [Line("hello", Style.PLAIN)]

    def test_error_with_hint(self) -> None:
        console = MockConsole()
        console.error("nix not found", hint="Install Nix")
        assert console.lines == [
            Line("error: nix not found", Style.FAIL),
            Line("hint: Install Nix", Style.DIM),
        ]

    def test_error_without_hint(self) -> None:
        console = MockConsole()
        console.error("bad config")
        assert console.messages == ["error: bad config"]

    def test_helpers(self) -> None:
        console = MockConsole()
        console.header("Title")
        console.print("a", Style.INFO)
        console.newline()
        console.print("b", Style.INFO)

        assert console.messages == ["Title", "a", "", "b"]
        assert console.text == "Title\na\n\nb"
        assert console.styled(Style.INFO) == ["a", "b"]
        assert console.find("b") == [Line("b", Style.INFO)]

    def test_implements_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.print("ok")


class TestRichConsole:
    def test_brackets_are_not_markup(self) -> None:
        out = io.StringIO()
        console = RichConsole(file=out)

        console.print('nix.settings.trusted-users = [ "root" "alice" ];', Style.DIM)

        assert out.getvalue() == 'nix.settings.trusted-users = [ "root" "alice" ];\n'

    def test_long_lines_are_not_wrapped(self) -> None:
        out = io.StringIO()
        long_path = "/nix/store/" + "x" * 200 + "-nix-health.toml"

        RichConsole(file=out).error(long_path, hint="check the file")

        assert out.getvalue().splitlines() == [f"error: {long_path}", "hint: check the file"]
