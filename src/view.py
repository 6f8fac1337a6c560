"""View logic: project task lists into rows, and rows into terminal lines.

project() is pure: the same lists, filter, order and edit cursor always
give the same rows. Rows are numbered 1..n in display order; the View maps
those numbers back to stable task ids so commands never index the
underlying lists directly.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import re
import shutil

from models import (EditCursor, Task, FILTERS, FILTER_COMPLETED, FILTER_PENDING,
                    FILTER_DELETED)
from theme import Palette, Styler, border_hex

EMPTY_MESSAGE = 'ops no tasks found!'
TITLE = 'Task List'
GLYPH_EDIT = 'pencil'
GLYPH_COMMIT = 'check'
GLYPH_SYMBOLS = {GLYPH_EDIT: '✎', GLYPH_COMMIT: '✓'}
KIND_ACTIVE = 'active'
KIND_DELETED = 'deleted'
MIN_TEXT_WIDTH = 12
TIME_WIDTH = 16
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True)
class Row:
    position: int
    task_id: int
    text: str
    time: str
    completed: bool
    kind: str
    readonly: bool
    edit_enabled: bool
    glyph: str
    editing: bool


@dataclass
class View:
    rows: List[Row] = field(default_factory=list)
    empty_message: str = ''
    filter: str = 'all'
    descending: bool = False

    def row_at(self, position: int) -> Optional[Row]:
        if 1 <= position <= len(self.rows):
            return self.rows[position - 1]
        return None

    def task_id_at(self, position: int) -> Optional[int]:
        row = self.row_at(position)
        return row.task_id if row else None

    def position_of(self, task_id: int) -> Optional[int]:
        for row in self.rows:
            if row.task_id == task_id:
                return row.position
        return None


def select(active: Sequence[Task], deleted: Sequence[Task], filter_name: str) -> List[Task]:
    """Choose the source list and apply the filter predicate (order kept)."""
    source = deleted if filter_name == FILTER_DELETED else active
    if filter_name == FILTER_COMPLETED:
        return [t for t in source if t.completed]
    if filter_name == FILTER_PENDING:
        return [t for t in source if not t.completed]
    return list(source)


def project(active: Sequence[Task], deleted: Sequence[Task], filter_name: str,
            descending: bool = False, edit: Optional[EditCursor] = None) -> View:
    filtered = select(active, deleted, filter_name)
    ordered = list(reversed(filtered)) if descending else filtered
    kind = KIND_DELETED if filter_name == FILTER_DELETED else KIND_ACTIVE
    rows: List[Row] = []
    for position, task in enumerate(ordered, start=1):
        editing = (kind == KIND_ACTIVE and edit is not None and edit.task_id == task.id)
        rows.append(Row(
            position=position,
            task_id=task.id,
            text=edit.draft_text if editing else task.text,
            time=edit.draft_time if editing else task.time,
            completed=task.completed,
            kind=kind,
            readonly=not editing,
            edit_enabled=kind == KIND_ACTIVE and not task.completed,
            glyph=GLYPH_COMMIT if editing else GLYPH_EDIT,
            editing=editing,
        ))
    return View(
        rows=rows,
        empty_message=EMPTY_MESSAGE if not filtered else '',
        filter=filter_name,
        descending=descending,
    )


# -------------------- terminal rendering --------------------
def display_time(value: str) -> str:
    return value.replace('T', ' ') if value else ''


def visible_len(s: str) -> int:
    return len(ANSI_RE.sub('', s))


def _fit(text: str, width: int) -> str:
    if len(text) <= width:
        return text + ' ' * (width - len(text))
    return text[:max(0, width - 1)] + '…'


def on_background(line: str, hex_code: str, styler: Styler) -> str:
    """Paint a whole line on hex_code, re-applying it after every inner reset."""
    if not styler.enabled:
        return line
    bg = styler.bg(hex_code)
    return bg + line.replace(styler.reset, styler.reset + bg) + styler.reset


def render_filter_bar(view: View, palette: Palette, styler: Styler) -> str:
    cells: List[str] = []
    for name in FILTERS:
        if name == view.filter:
            cells.append(styler.color(f' {name} ', styler.bg(palette.active),
                                      styler.fg(palette.active_text), styler.bold))
        else:
            cells.append(styler.color(f' {name} ', styler.bg(palette.button),
                                      styler.fg(palette.text)))
    order = 'desc' if view.descending else 'asc'
    return ' '.join(cells) + styler.color(f'   sort: {order}', styler.fg(palette.text))


def render_row(row: Row, palette: Palette, styler: Styler, text_width: int) -> str:
    num = styler.color(f'{row.position:>3}.', styler.fg(palette.active), styler.bold)
    marker = styler.color('>', styler.fg(palette.active), styler.bold) if row.editing else ' '
    text = _fit(row.text if row.text else '<untitled>', text_width)
    time = _fit(display_time(row.time), TIME_WIDTH)
    text_styles = [styler.fg(palette.text)]
    if row.completed and row.kind == KIND_ACTIVE:
        text_styles.append(styler.strike)
    if row.editing:
        text_styles.append(styler.bg(palette.button))
    hint_color = styler.fg(border_hex(palette))
    if row.kind == KIND_DELETED:
        box = '   '
        hints = f'restore {row.position} | purge {row.position}'
    else:
        box = '[x]' if row.completed else '[ ]'
        glyph = GLYPH_SYMBOLS[row.glyph]
        edit_hint = f'{glyph} edit {row.position}' if row.edit_enabled else f'{glyph} --'
        hints = f'{edit_hint} | rm {row.position}'
    line = ' '.join([
        marker + num,
        styler.color(box, styler.fg(palette.text)),
        styler.color(text, *text_styles),
        styler.color(time, styler.fg(palette.text)),
        styler.color(hints, hint_color),
    ])
    return on_background(line, palette.secondary, styler)


def render_lines(view: View, palette: Palette, styler: Styler,
                 width: Optional[int] = None) -> List[str]:
    """Full redraw of the list for the given palette."""
    if width is None:
        width = shutil.get_terminal_size((100, 30)).columns
    fixed = 5 + 1 + 3 + 1 + 1 + TIME_WIDTH + 1 + 24
    text_width = max(MIN_TEXT_WIDTH, width - fixed)
    lines = [
        styler.color(TITLE, styler.fg(palette.text), styler.bold),
        render_filter_bar(view, palette, styler),
        styler.color('-' * max(1, width - 1), styler.fg(border_hex(palette))),
    ]
    if view.empty_message:
        lines.append(styler.color(view.empty_message, styler.fg(palette.text)))
    lines = [on_background(line, palette.bg, styler) for line in lines]
    for row in view.rows:
        lines.append(render_row(row, palette, styler, text_width))
    return lines
