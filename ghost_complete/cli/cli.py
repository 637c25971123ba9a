"""
cli.py - interactive command line playground for the suggestion engine
Features:
- Every typed line shows completions for its last token and next-word
  predictions, then gets learned (words + transitions)
- Per-group state persisted to a data directory through FileBlobStore
- Slash commands for stats, word/pattern listings, config and clearing
- Uses Rich for tables and formatting
"""

import argparse
import json
import os
import sys
from typing import List, Optional

# ui styling with Rich
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from ghost_complete.core.autocompleter import GhostComplete
from ghost_complete.core.context import split_words
from ghost_complete.utils.config_manager import ConfigRegistry
from ghost_complete.utils.logger_utils import Log
from ghost_complete.utils.model_store import FileBlobStore

DEFAULT_DATA_DIR = os.path.join(os.getcwd(), "data")
CONFIG_NAME = "config.json"

HELP = (
    "Commands: /quit /stats /words /patterns /group NAME "
    "/config KEY=VALUE /clear words|patterns|all /flush /help"
)


class CLI:
    """Command-line loop around one GhostComplete engine."""

    def __init__(self, data_dir: str = DEFAULT_DATA_DIR, group: str = "",
                 console: Optional[Console] = None, engine: Optional[GhostComplete] = None):
        """
        - Loads group config from <data_dir>/config.json if present
        - Opens a FileBlobStore on the data directory
        """
        self.console = console or Console()
        self.data_dir = data_dir
        self.config_path = os.path.join(data_dir, CONFIG_NAME)
        if engine is None:
            cfg = ConfigRegistry()
            cfg.load(self.config_path)
            engine = GhostComplete(FileBlobStore(data_dir), cfg)
        self.engine = engine
        self.group = group
        self.running = True

    def run(self) -> None:
        self.console.rule("[bold magenta]GhostComplete[/bold magenta]")
        self.console.print("[cyan]Type text to learn from it; suggestions are shown before learning.[/cyan]")
        self.console.print(HELP + "\n")

        while self.running:
            try:
                line = self.console.input(f"[green]{self.group or 'default'}>[/green] ")
            except (EOFError, KeyboardInterrupt):
                self._exit()
                break
            self.handle(line)

    # COMMAND HANDLING -----------------------------------------------------------
    def handle(self, line: str) -> None:
        if not line or not line.strip():
            return
        if line.startswith("/"):
            self._handle_command(line.strip())
            return
        self._process_input(line)

    def _handle_command(self, cmd: str) -> None:
        name, _, arg = cmd.partition(" ")
        arg = arg.strip()

        if name == "/quit":
            self._exit()
        elif name == "/stats":
            self._show_stats()
        elif name == "/words":
            self._show_words()
        elif name == "/patterns":
            self._show_patterns()
        elif name == "/group":
            self.group = arg
            self.console.print(f"[cyan]Group:[/cyan] {arg or 'default'}")
        elif name == "/config":
            self._config(arg)
        elif name == "/clear":
            self._clear(arg or "all")
        elif name == "/flush":
            n = self.engine.flush()
            self.console.print(f"[green]Flushed {n} blob(s).[/green]")
        elif name == "/help":
            self.console.print(HELP)
        else:
            self.console.print(f"[red]Unknown command:[/red] {cmd}")

    # CORE INPUT PROCESSING ---------------------------------------------------------------
    def _process_input(self, text: str) -> None:
        """suggest -> display -> learn"""
        words = split_words(text)
        token = words[-1] if words else ""
        completions = self.engine.get_completions(self.group, token)
        predictions = self.engine.get_predictions(self.group, text)
        self._display_suggestions(completions, predictions)

        for w in words:
            self.engine.on_word_finalized(self.group, w)
        self.engine.observe_text(self.group, text)

    # DISPLAY -------------------------------------------------------------------------------
    def _display_suggestions(self, completions: List[str], predictions: List[str]) -> None:
        if not completions and not predictions:
            self.console.print("[dim](no suggestions)[/dim]")
            return
        table = Table(title="Suggestions", box=box.SIMPLE, show_edge=False)
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Completion", style="bold")
        table.add_column("Next word", style="magenta")
        for i in range(max(len(completions), len(predictions))):
            table.add_row(
                str(i + 1),
                completions[i] if i < len(completions) else "",
                predictions[i] if i < len(predictions) else "",
            )
        self.console.print(table)

    def _show_stats(self) -> None:
        stats = self.engine.get_stats(self.group)
        table = Table(title=f"Stats ({self.group or 'default'})", box=box.MINIMAL)
        table.add_column("Metric", style="cyan")
        table.add_column("Value")
        for k, v in stats.items():
            table.add_row(k, str(v))
        self.console.print(table)

    def _show_words(self) -> None:
        table = Table(title="Learned words", box=box.MINIMAL)
        table.add_column("Word")
        table.add_column("Freq", justify="right")
        for w in self.engine.list_words(self.group)[:50]:
            entry = self.engine.vocabulary.entry(self.group, w)
            table.add_row(w, str(entry.frequency if entry else ""))
        self.console.print(table)

    def _show_patterns(self) -> None:
        patterns = self.engine.list_patterns(self.group)
        self.console.print(Panel(json.dumps(patterns, indent=2, sort_keys=True),
                                 title="Patterns", border_style="yellow"))

    # CONFIG/CLEAR ----------------------------------------------------------
    def _config(self, arg: str) -> None:
        if arg:
            key, sep, value = arg.partition("=")
            if not sep:
                self.console.print("[red]Use /config KEY=VALUE[/red]")
                return
            self.engine.set_group_config(self.group, {key.strip(): value.strip()})
            try:
                self.engine.config.save(self.config_path)
            except OSError as e:
                Log.error(f"[CLI] config save failed: {e}")
        cfg = self.engine.get_group_config(self.group).as_dict()
        self.console.print(Panel(json.dumps(cfg, indent=2), title="Config", border_style="cyan"))

    def _clear(self, what: str) -> None:
        if what == "words":
            self.engine.clear_words(self.group)
        elif what == "patterns":
            self.engine.clear_patterns(self.group)
        elif what == "all":
            self.engine.clear_all(self.group)
        else:
            self.console.print(f"[red]Nothing called {what!r} to clear[/red]")
            return
        self.console.print(f"[yellow]Cleared {what}.[/yellow]")

    # EXIT --------------------------------------------------------------------
    def _exit(self) -> None:
        self.console.rule("[red]Exiting[/red]")
        self.engine.close()
        self.running = False


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="GhostComplete interactive playground")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR, help="where group blobs and config.json live")
    parser.add_argument("--group", default="", help="group to start in (default group if omitted)")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    Log.configure(path=args.log_file, level="DEBUG" if args.verbose else "WARNING")
    CLI(data_dir=args.data_dir, group=args.group).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
