"""Interactive fuzzy selector (prompt_toolkit).

Type to filter, Up/Down (or Ctrl-P/Ctrl-N) to move, Enter to accept, Tab
to mark items in multi mode, Esc or Ctrl-C to abort. Aborting raises
SelectionAborted; callers decide whether that is fatal.
"""

from typing import Callable, List, Sequence, Set, Tuple, TypeVar

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.data_structures import Point
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl
from prompt_toolkit.styles import Style

T = TypeVar("T")

_STYLE = Style.from_dict(
    {
        "prompt": "bold",
        "counter": "ansiyellow",
        "current": "reverse",
        "marked": "ansigreen bold",
    }
)


class SelectionAborted(Exception):
    """Raised when the user leaves the selector without choosing."""

    pass


def fuzzy_match(query: str, text: str) -> Tuple[int, int] | None:
    """Case-insensitive subsequence match of query in text.

    Returns (span, start) of the tightest match, or None. Empty query
    matches everything with span 0.
    """
    if not query:
        return (0, 0)
    q = query.lower()
    t = text.lower()
    best: Tuple[int, int] | None = None
    start = t.find(q[0])
    while start != -1:
        pos = start
        for ch in q[1:]:
            pos = t.find(ch, pos + 1)
            if pos == -1:
                break
        if pos == -1:
            break
        span = pos - start + 1
        if best is None or span < best[0]:
            best = (span, start)
        start = t.find(q[0], start + 1)
    return best


def filter_items(query: str, labels: Sequence[str]) -> List[int]:
    """Indices of labels matching query, tightest match first, then input
    order."""
    scored = []
    for i, label in enumerate(labels):
        m = fuzzy_match(query, label)
        if m is not None:
            scored.append((m[0], m[1], i))
    scored.sort()
    return [i for _, _, i in scored]


class SelectorState:
    """Query, filtered matches, cursor and marks of one selector."""

    def __init__(self, labels: Sequence[str], multi: bool = False) -> None:
        self.labels = list(labels)
        self.multi = multi
        self.query = ""
        self.cursor = 0
        self.marked: Set[int] = set()
        self.matches = filter_items("", self.labels)

    def set_query(self, query: str) -> None:
        self.query = query
        self.matches = filter_items(query, self.labels)
        self.cursor = 0

    def move(self, delta: int) -> None:
        if self.matches:
            self.cursor = max(0, min(len(self.matches) - 1, self.cursor + delta))

    @property
    def current(self) -> int | None:
        if not self.matches:
            return None
        return self.matches[self.cursor]

    def toggle(self) -> None:
        """Mark or unmark the current item (multi mode only) and move down."""
        if not self.multi or self.current is None:
            return
        self.marked ^= {self.current}
        self.move(1)

    def result(self) -> List[int]:
        """Marked indices, or the current one if nothing is marked."""
        if self.multi and self.marked:
            return sorted(self.marked)
        if self.current is None:
            return []
        return [self.current]

    def fragments(self) -> list:
        lines = []
        for row, idx in enumerate(self.matches):
            mark = "*" if idx in self.marked else " "
            style = "class:current" if row == self.cursor else ""
            if idx in self.marked:
                style = f"{style} class:marked".strip()
            pointer = ">" if row == self.cursor else " "
            lines.append((style, f"{pointer}{mark} {self.labels[idx]}\n"))
        return lines


def _run(state: SelectorState, prompt: str) -> List[int]:
    query = Buffer(multiline=False, on_text_changed=lambda buf: state.set_query(buf.text))

    kb = KeyBindings()

    @kb.add("up")
    @kb.add("c-p")
    def _up(event) -> None:
        state.move(-1)

    @kb.add("down")
    @kb.add("c-n")
    def _down(event) -> None:
        state.move(1)

    @kb.add("tab")
    def _toggle(event) -> None:
        state.toggle()

    @kb.add("enter")
    def _accept(event) -> None:
        chosen = state.result()
        if chosen:
            event.app.exit(result=chosen)

    @kb.add("escape", eager=True)
    @kb.add("c-c")
    @kb.add("c-d")
    def _abort(event) -> None:
        event.app.exit(exception=SelectionAborted())

    hint = "  (Tab to mark)" if state.multi else ""
    counter = FormattedTextControl(lambda: [("class:counter", f"  {len(state.matches)}/{len(state.labels)}{hint}")])
    items = FormattedTextControl(
        state.fragments,
        get_cursor_position=lambda: Point(x=0, y=state.cursor),
    )
    container = HSplit(
        [
            Window(
                BufferControl(buffer=query),
                height=1,
                get_line_prefix=lambda lineno, wrap_count: [("class:prompt", prompt)],
            ),
            Window(counter, height=1),
            Window(items),
        ]
    )
    app: Application = Application(
        layout=Layout(container, focused_element=query),
        key_bindings=kb,
        style=_STYLE,
        full_screen=True,
    )
    return app.run()


def find(items: Sequence[T], label: Callable[[int], str], prompt: str = "> ") -> int:
    """Let the user pick one item; return its index.

    Raises:
        SelectionAborted: If the user aborts or items is empty.
    """
    if not items:
        raise SelectionAborted()
    state = SelectorState([label(i) for i in range(len(items))], multi=False)
    return _run(state, prompt)[0]


def find_multi(items: Sequence[T], label: Callable[[int], str], prompt: str = "> ") -> List[int]:
    """Let the user pick any number of items; return their indices.

    Raises:
        SelectionAborted: If the user aborts or items is empty.
    """
    if not items:
        raise SelectionAborted()
    state = SelectorState([label(i) for i in range(len(items))], multi=True)
    return _run(state, prompt)
