from __future__ import annotations

import argparse
import logging
from functools import partial
from pathlib import Path
from typing import Never, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich_argparse import RawTextRichHelpFormatter

from code_workbench import (
    HttpExecutionClient,
    JsonFileBackend,
    LanguageRegistry,
    SessionKind,
    SessionStore,
    Workbench,
    WorkbenchConfig,
)
from code_workbench.detection import matching_probes
from code_workbench.languages import LanguageDescriptor
from code_workbench.outcomes import InputRequired
from code_workbench.preferences import EDITOR_THEMES, EditorPreferences

_CONSOLE = Console(no_color=False)


class _CLIHelpFormatter(RawTextRichHelpFormatter):
    """Rich formatter with explicit high-contrast CLI styles.

    Example:
        ```python
        parser = argparse.ArgumentParser(formatter_class=_CLIHelpFormatter)
        ```
    """

    styles = {
        "argparse.args": "bold cyan",
        "argparse.groups": "bold magenta",
        "argparse.help": "white",
        "argparse.metavar": "bold yellow",
        "argparse.prog": "bold bright_blue",
        "argparse.syntax": "bold bright_white",
        "argparse.text": "bright_white",
    }


_HELP_FORMATTER = partial(
    _CLIHelpFormatter,
    max_help_position=34,
    width=120,
)


class _RichArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that renders errors via Rich.

    Example:
        ```python
        parser = _RichArgumentParser(prog="python -m cwb")
        ```
    """

    def error(self, message: str) -> Never:
        """Render parse errors with Rich and exit.

        Example:
            ```python
            # parser.error("invalid usage")
            ```
        """
        _CONSOLE.print(Panel.fit(f"[bold red]Error:[/bold red] {message}", border_style="red"))
        self.print_help()
        raise SystemExit(2)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the code workbench.

    Example:
        ```python
        parser = build_parser()
        ```
    """
    parser = _RichArgumentParser(
        prog="python -m cwb",
        description=(
            "code-workbench CLI\n"
            "Run solutions against the remote execution sandbox.\n"
            "Code and stdin are kept per subject and language between runs."
        ),
        epilog=(
            "Quick Examples:\n"
            "  python -m cwb languages\n"
            "  python -m cwb detect solution.py\n"
            "  python -m cwb run solution.py --stdin '3 4'\n"
            "  python -m cwb run Main.java --subject two-sum --stdin-file cases.txt\n"
            "  python -m cwb session show two-sum --language java\n"
            "  python -m cwb session clear two-sum --language java\n\n"
            "Config Example:\n"
            "  python -m cwb --config workbench.toml run solution.cpp"
        ),
        formatter_class=_HELP_FORMATTER,
    )
    parser.add_argument(
        "--config",
        help=(
            "Path to a workbench TOML file.\n"
            "Reads the [workbench] table: base_url, execute_path, wire_format, ..."
        ),
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log requests and session storage activity to stderr.",
    )

    sub = parser.add_subparsers(
        dest="command",
        required=True,
        parser_class=_RichArgumentParser,
    )

    sub.add_parser(
        "languages",
        help="List supported languages and their executors.",
        description="Show every registered language with executor id, version and extension.",
        formatter_class=_HELP_FORMATTER,
    )

    detect_cmd = sub.add_parser(
        "detect",
        help="Check whether a source file looks like it reads stdin.",
        description=(
            "Apply the stdin probes to a source file.\n"
            "Prints which probes matched."
        ),
        formatter_class=_HELP_FORMATTER,
    )
    detect_cmd.add_argument("file")

    run_cmd = sub.add_parser(
        "run",
        help="Submit a source file to the execution sandbox.",
        description=(
            "Run one source file remotely and classify the result.\n"
            "The language is taken from --language or the file extension."
        ),
        epilog=(
            "Examples:\n"
            "  python -m cwb run solution.py\n"
            "  python -m cwb run main.go --language golang --stdin '5'"
        ),
        formatter_class=_HELP_FORMATTER,
    )
    run_cmd.add_argument("file")
    run_cmd.add_argument(
        "--language",
        help="Language name or alias (js, py, cpp, golang, ...).",
    )
    run_cmd.add_argument(
        "--subject",
        help="Subject id the session is stored under (default: file name stem).",
    )
    stdin_group = run_cmd.add_mutually_exclusive_group()
    stdin_group.add_argument("--stdin", help="Text passed to the program on stdin.")
    stdin_group.add_argument("--stdin-file", help="File whose contents are passed on stdin.")

    session_cmd = sub.add_parser(
        "session",
        help="Inspect or clear saved code and stdin.",
        description="Session commands operate on one subject and language pair.",
        formatter_class=_HELP_FORMATTER,
    )
    session_sub = session_cmd.add_subparsers(
        dest="action",
        required=True,
        parser_class=_RichArgumentParser,
    )
    for action, help_text in (
        ("show", "Show saved code and stdin for a subject."),
        ("clear", "Forget saved code and stdin for a subject."),
    ):
        action_cmd = session_sub.add_parser(
            action,
            help=help_text,
            description=help_text,
            formatter_class=_HELP_FORMATTER,
        )
        action_cmd.add_argument("subject")
        action_cmd.add_argument("--language", help="Language name or alias (default: configured).")

    prefs_cmd = sub.add_parser(
        "prefs",
        help="Show or change editor font size and theme.",
        description="Editor preferences are shared by every subject.",
        formatter_class=_HELP_FORMATTER,
    )
    prefs_cmd.add_argument("--theme", choices=EDITOR_THEMES, help="Editor color theme.")
    size_group = prefs_cmd.add_mutually_exclusive_group()
    size_group.add_argument("--bigger", action="store_true", help="Increase font size by one step.")
    size_group.add_argument("--smaller", action="store_true", help="Decrease font size by one step.")

    return parser


def load_config(args: argparse.Namespace) -> WorkbenchConfig:
    """Load settings from --config, or use defaults.

    Example:
        ```python
        config = load_config(args)
        ```
    """
    if args.config:
        return WorkbenchConfig.from_file(args.config)
    return WorkbenchConfig()


def build_store(config: WorkbenchConfig, registry: LanguageRegistry) -> SessionStore:
    """Create the file-backed session store described by `config`.

    Example:
        ```python
        store = build_store(WorkbenchConfig(), LanguageRegistry())
        ```
    """
    backend = JsonFileBackend(config.resolved_storage_path, max_bytes=config.storage_max_bytes)
    return SessionStore(backend, namespace=config.namespace, registry=registry)


def _configure_logging(verbose: bool) -> None:
    """Route library logs through Rich when --verbose is set.

    Example:
        ```python
        _configure_logging(True)
        ```
    """
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _resolve_language(
    registry: LanguageRegistry, name: str | None, file_path: Path | None = None
) -> LanguageDescriptor:
    """Pick a language from a name, a file extension, or the default.

    Example:
        ```python
        lang = _resolve_language(LanguageRegistry(), None, Path("main.rs"))
        ```
    """
    if name:
        return registry.find_by_fuzzy_name(name)
    if file_path is not None:
        by_extension = registry.find_by_extension(file_path.suffix)
        if by_extension is not None:
            return by_extension
    return registry.default_language()


def _print_languages(registry: LanguageRegistry) -> None:
    """Render the language registry in a rich table.

    Example:
        ```python
        _print_languages(LanguageRegistry())
        ```
    """
    table = Table(title="Supported Languages")
    table.add_column("Language", style="cyan")
    table.add_column("Executor", style="magenta")
    table.add_column("Version")
    table.add_column("Extension")
    default = registry.default_language()
    for lang in registry:
        name = f"{lang.display_name} (default)" if lang == default else lang.display_name
        table.add_row(name, lang.executor_id, lang.executor_version, f".{lang.file_extension}")
    _CONSOLE.print(table)


def _read_text(parser: argparse.ArgumentParser, path: str) -> str:
    """Read a user-supplied file, reporting failures as usage errors.

    Example:
        ```python
        source = _read_text(build_parser(), "solution.py")
        ```
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        parser.error(f"Cannot read {path}: {exc}")


def _run_file(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    config: WorkbenchConfig,
    registry: LanguageRegistry,
) -> int:
    """Handle `run`: submit a file through a workbench and print the transcript.

    Example:
        ```python
        code = _run_file(build_parser(), args, WorkbenchConfig(), LanguageRegistry())
        ```
    """
    source_path = Path(args.file)
    source = _read_text(parser, args.file)
    stdin = args.stdin
    if stdin is None and args.stdin_file is not None:
        stdin = _read_text(parser, args.stdin_file)
    language = _resolve_language(registry, args.language, source_path)
    client = HttpExecutionClient.from_config(config)
    try:
        bench = Workbench(
            args.subject or source_path.stem,
            client=client,
            store=build_store(config, registry),
            registry=registry,
            language=language,
        )
        bench.set_code(source)
        if stdin is not None:
            bench.set_input(stdin)
        outcome = bench.run()
    finally:
        client.close()

    if isinstance(outcome, InputRequired):
        style = "yellow"
    else:
        style = "green" if outcome.ok else "red"
    _CONSOLE.print(
        Panel(
            Text(bench.transcript),
            title=f"{language.display_name} · {type(outcome).__name__}",
            border_style=style,
        )
    )
    return 0 if outcome.ok else 1


def _session_command(
    args: argparse.Namespace, config: WorkbenchConfig, registry: LanguageRegistry
) -> int:
    """Handle `session show` and `session clear`.

    Example:
        ```python
        code = _session_command(args, WorkbenchConfig(), LanguageRegistry())
        ```
    """
    store = build_store(config, registry)
    language = _resolve_language(registry, args.language)
    name = language.display_name
    if args.action == "clear":
        store.clear(args.subject, name)
        _CONSOLE.print(
            Panel.fit(f"Cleared session {args.subject} ({name})", style="bold green")
        )
        return 0

    code = store.load(args.subject, name, SessionKind.CODE)
    stdin = store.load(args.subject, name, SessionKind.INPUT)
    if code is None and stdin is None:
        _CONSOLE.print(
            Panel.fit(f"No saved session for {args.subject} ({name})", style="bold yellow")
        )
        return 1
    _CONSOLE.print(
        Panel(Text(code or "(template)"), title=f"{args.subject} · {name} · code", border_style="cyan")
    )
    _CONSOLE.print(
        Panel(Text(stdin or "(empty)"), title=f"{args.subject} · {name} · input", border_style="cyan")
    )
    return 0


def _prefs_command(args: argparse.Namespace, config: WorkbenchConfig) -> int:
    """Handle `prefs`: apply requested changes and show the result.

    Example:
        ```python
        code = _prefs_command(args, WorkbenchConfig())
        ```
    """
    backend = JsonFileBackend(config.resolved_storage_path, max_bytes=config.storage_max_bytes)
    prefs = EditorPreferences.load(backend, config.namespace)
    changed = False
    if args.theme:
        prefs.set_theme(args.theme)
        changed = True
    if args.bigger:
        prefs.increase_font_size()
        changed = True
    if args.smaller:
        prefs.decrease_font_size()
        changed = True
    if changed and not prefs.save(backend, config.namespace):
        _CONSOLE.print(Panel.fit("Preferences could not be saved", style="bold red"))
        return 1
    table = Table(title="Editor Preferences")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("font size", f"{prefs.font_size}px")
    table.add_row("theme", prefs.theme)
    _CONSOLE.print(table)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the `cwb` CLI command handler.

    Example:
        ```python
        code = main(["languages"])
        ```
    """
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)
    try:
        config = load_config(args)
    except ValueError as exc:
        parser.error(str(exc))
    registry = LanguageRegistry(default_name=config.default_language)

    if args.command == "languages":
        _print_languages(registry)
        return 0
    if args.command == "detect":
        probes = matching_probes(_read_text(parser, args.file))
        if probes:
            _CONSOLE.print(
                Panel.fit(
                    "Reads stdin: yes\nMatched probes: " + ", ".join(probes),
                    style="bold yellow",
                )
            )
        else:
            _CONSOLE.print(Panel.fit("Reads stdin: no", style="bold green"))
        return 0
    if args.command == "run":
        return _run_file(parser, args, config, registry)
    if args.command == "session":
        return _session_command(args, config, registry)
    if args.command == "prefs":
        return _prefs_command(args, config)

    parser.error("Unhandled command")
