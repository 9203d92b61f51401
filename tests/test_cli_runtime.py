from __future__ import annotations

import io

from rich.console import Console

from src.svg_clip.cli_runtime import CLIAppError, CliOutputManager, CliOutputManagerProtocol, NullCliOutputManager


def _manager(**kwargs) -> tuple[CliOutputManager, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, no_color=True, highlight=False, force_terminal=False, width=120)
    options = {"quiet": False, "verbose": False, "no_color": True}
    options.update(kwargs)
    return CliOutputManager(console=console, **options), buffer


def test_cli_app_error_defaults_rich_message() -> None:
    error = CLIAppError("boom")

    assert error.code == 1
    assert error.rich_message == "boom"


def test_key_values_escape_markup() -> None:
    manager, buffer = _manager()

    manager.section("Input")
    manager.key_value("Source", "[bold]not markup[/bold].svg")

    output = buffer.getvalue()
    assert "Input" in output
    assert "Source: [bold]not markup[/bold].svg" in output


def test_quiet_suppresses_everything_but_the_banner() -> None:
    manager, buffer = _manager(quiet=True)

    manager.banner("svg-clip")
    manager.section("Geometry")
    manager.key_value("Viewport", "1920 × 1080")
    manager.line("done")

    assert buffer.getvalue().strip() == "svg-clip"


def test_verbose_lines_require_verbose() -> None:
    quiet_manager, quiet_buffer = _manager()
    loud_manager, loud_buffer = _manager(verbose=True)

    quiet_manager.verbose_line("Working directory: /tmp/x")
    loud_manager.verbose_line("Working directory: /tmp/x")

    assert quiet_buffer.getvalue() == ""
    assert "Working directory: /tmp/x" in loud_buffer.getvalue()


def test_quiet_overrides_verbose() -> None:
    manager, _buffer = _manager(quiet=True, verbose=True)

    assert manager.verbose is False


def test_warnings_are_collected_in_order() -> None:
    manager, _buffer = _manager()

    manager.warn("first")
    manager.warn("second")

    assert manager.get_warnings() == ["first", "second"]
    assert manager.iter_warnings() == ["first", "second"]


def test_quiet_progress_is_disabled() -> None:
    manager, _buffer = _manager(quiet=True)

    assert manager.progress().disable is True


def test_null_manager_discards_output_but_keeps_warnings() -> None:
    manager = NullCliOutputManager()

    manager.banner("svg-clip")
    manager.key_value("Output", "clip.mov")
    manager.warn("fallback size")

    assert manager.quiet is True
    assert manager.get_warnings() == ["fallback size"]
    assert manager.progress().disable is True


def _public_methods(cls: type) -> set[str]:
    return {name for name, value in vars(cls).items() if callable(value) and not name.startswith("_")}


def test_managers_expose_only_the_reporting_surface() -> None:
    expected = _public_methods(CliOutputManagerProtocol)

    assert expected == {
        "warn",
        "get_warnings",
        "banner",
        "section",
        "line",
        "key_value",
        "verbose_line",
        "progress",
        "iter_warnings",
    }
    assert _public_methods(CliOutputManager) == expected
    assert _public_methods(NullCliOutputManager) == expected
