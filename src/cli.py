"""Command-line interface loop for the task list.

The list is cleared and redrawn after every command, so each command's
message is printed under the fresh list rather than before it.
"""
from datetime import datetime
from typing import Callable, List, Optional
import logging

from controller import Controller
from models import FILTERS
from settings import Settings
from theme import Styler, theme_names
from view import render_lines

logger = logging.getLogger(__name__)

TIME_FORMAT = '%Y-%m-%dT%H:%M'
CLEAR_TIME = '-'

FILTER_ALIASES = {
    'a': 'all',
    'c': 'completed',
    'p': 'pending',
    'd': 'deleted',
}
FILTER_ALIASES.update({name: name for name in FILTERS})

ORDER_ALIASES = {
    'asc': 'asc',
    'ascending': 'asc',
    'desc': 'desc',
    'descending': 'desc',
}


# --- terminal control helpers ---
# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home)
def _clear_screen() -> None:
    print("\033[3J\033[H\033[2J\033[H", end="", flush=True)


def _enter_alt_screen() -> None:
    print("\033[?1049h", end="", flush=True)


def _leave_alt_screen() -> None:
    print("\033[?1049l", end="", flush=True)


def parse_time(raw: str) -> str:
    """Normalize a user-supplied datetime to YYYY-MM-DDTHH:MM.

    Accepts ISO dates with or without a time ('2026-10-20', '2026-10-20 09:30').
    '-' or '' clears the time. Raises ValueError for anything else.
    """
    raw = raw.strip()
    if raw in ('', CLEAR_TIME):
        return ''
    return datetime.fromisoformat(raw).strftime(TIME_FORMAT)


def split_text_time(rest: str):
    """'buy milk @ 2026-10-20 09:00' -> ('buy milk', '2026-10-20T09:00').

    The part after the last ' @ ' is a time only when it parses as one;
    otherwise the whole string is task text.
    """
    if ' @ ' in f' {rest} ':
        text, _, raw_time = f' {rest} '.rpartition(' @ ')
        try:
            return text.strip(), parse_time(raw_time)
        except ValueError:
            pass
    return rest.strip(), ''


def _position(token: str) -> Optional[int]:
    token = token.rstrip('.')
    return int(token) if token.isdecimal() else None


class CLI:
    def __init__(self, controller: Controller, settings: Settings,
                 styler: Optional[Styler] = None,
                 input_fn: Callable[[str], str] = input):
        self.controller: Controller = controller
        self.settings = settings
        self.styler = styler or Styler.for_stream(settings)
        self.alt_screen: bool = settings.alt_screen
        self.input = input_fn

    def screen(self) -> List[str]:
        view = self.controller.view()
        return render_lines(view, self.controller.themes.palette, self.styler)

    def run(self) -> None:
        """Main REPL loop; the list is cleared and redrawn each cycle."""
        exit_message: Optional[str] = None
        message = ''
        if self.alt_screen:
            _enter_alt_screen()
        try:
            while True:
                _clear_screen()
                print('\n'.join(self.screen()))
                if message:
                    print(f"\n{message}")
                line = self.input("\n: ").strip()
                if not line:
                    message = ''
                    continue
                lower = line.lower()
                if lower == 'help':
                    _clear_screen()
                    print(self.help_text())
                    self.input("\nPress Enter to return to the list...")
                    message = ''
                    continue
                if lower in ('exit', 'quit'):
                    exit_message = "Goodbye."
                    break
                message = self.handle_command(line)
        except (KeyboardInterrupt, EOFError):
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                _leave_alt_screen()
            if exit_message:
                print(exit_message)

    # -------------------- command dispatch --------------------
    def handle_command(self, line: str) -> str:
        tokens = line.split()
        if not tokens:
            return ''
        cmd = tokens[0].lower()
        rest = line.strip()[len(tokens[0]):].strip()
        logger.debug("command %r", cmd)
        if cmd == 'add':
            return self._cmd_add(rest)
        if cmd in ('done', 'toggle', 'x'):
            return self._with_position(tokens, self.controller.toggle_complete, 'done <n>')
        if cmd in ('edit', 'e'):
            return self._with_position(tokens, self.controller.edit_task, 'edit <n>')
        if cmd == 'text':
            return self.controller.update_draft(text=rest)
        if cmd == 'time':
            return self._cmd_time(rest)
        if cmd in ('rm', 'delete'):
            return self._with_position(tokens, self.controller.soft_delete, 'rm <n>')
        if cmd == 'restore':
            return self._with_position(tokens, self.controller.restore, 'restore <n>')
        if cmd == 'purge':
            return self._with_position(tokens, self.controller.permanently_delete, 'purge <n>')
        if cmd == 'clear':
            return self.controller.delete_all(self.confirm)
        if cmd in ('filter', 'f'):
            return self._cmd_filter(tokens)
        if cmd == 'sort':
            return self._cmd_sort(tokens)
        if cmd == 'theme':
            return self._cmd_theme(tokens)
        return "Unknown command. Type 'help' for instructions."

    # ---- individual command helpers ----
    def _with_position(self, tokens: List[str], handler: Callable[[int], str], usage: str) -> str:
        if len(tokens) != 2:
            return f"Usage: {usage}"
        position = _position(tokens[1])
        if position is None:
            return "Invalid task number."
        return handler(position)

    def _cmd_add(self, rest: str) -> str:
        if not rest:
            rest = self.input("Enter task: ").strip()
            if not rest:
                return ''
            raw_time = self.input("Enter date/time (YYYY-MM-DD HH:MM, blank for none): ")
            try:
                return self.controller.add_task(rest, parse_time(raw_time))
            except ValueError:
                return "Invalid time."
        text, time = split_text_time(rest)
        return self.controller.add_task(text, time)

    def _cmd_time(self, rest: str) -> str:
        if not rest:
            return f"Usage: time <YYYY-MM-DD HH:MM|{CLEAR_TIME}>"
        try:
            value = parse_time(rest)
        except ValueError:
            return "Invalid time."
        return self.controller.update_draft(time=value)

    def _cmd_filter(self, tokens: List[str]) -> str:
        if len(tokens) != 2:
            return "Usage: filter <all|completed|pending|deleted>"
        name = FILTER_ALIASES.get(tokens[1].lower())
        if not name:
            return "Invalid filter."
        return self.controller.filter_tasks(name)

    def _cmd_sort(self, tokens: List[str]) -> str:
        if len(tokens) != 2:
            return "Usage: sort <asc|desc>"
        order = ORDER_ALIASES.get(tokens[1].lower())
        if not order:
            return "Invalid order."
        return self.controller.set_order(order)

    def _cmd_theme(self, tokens: List[str]) -> str:
        if len(tokens) == 1:
            return self._pick_theme()
        if len(tokens) != 2:
            return "Usage: theme [name]"
        return self.controller.select_theme(tokens[1].lower())

    # -------------------- user-interactive flows --------------------
    def _pick_theme(self) -> str:
        names = theme_names()
        current = self.controller.themes.name
        print("Themes:")
        for i, name in enumerate(names, start=1):
            mark = '*' if name == current else ' '
            print(f"  {mark} {i}. {name}")
        choice = self.input("Select theme (number or name, blank to cancel): ").strip().lower()
        if not choice:
            return ''
        if choice.isdecimal() and 1 <= int(choice) <= len(names):
            choice = names[int(choice) - 1]
        return self.controller.select_theme(choice)

    def confirm(self, question: str) -> bool:
        answer = self.input(f"{question} [y/N]: ").strip().lower()
        return answer in ('y', 'yes')

    @staticmethod
    def help_text() -> str:
        return '\n'.join([
            "Commands:",
            "  add                    Add a task (prompts for text and time)",
            "  add <text> [@ <time>]  Shorthand add, e.g. add buy milk @ 2026-10-20 09:00",
            "  done <n>               Toggle completion of task n",
            "  edit <n>               Start editing task n; run again on n to save",
            "  text <new text>        Change the text of the task being edited",
            "  time <time|->          Change (or clear with -) the time being edited",
            "  rm <n>                 Move task n to deleted",
            "  restore <n>            Restore deleted task n (deleted filter)",
            "  purge <n>              Permanently delete task n (deleted filter)",
            "  clear                  Delete all tasks and deleted tasks (asks first)",
            "  filter <name>          all / completed / pending / deleted (a/c/p/d)",
            "  sort <asc|desc>        Display order",
            "  theme [name]           Pick a theme: " + ', '.join(theme_names()),
            "  help                   Show this help (press Enter to return)",
            "  exit                   Exit",
        ])
