"""
Browsing/editing state machine for the interactive run command editor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from catalog import Catalog, ParameterInstance, RunFlag
from constants import BEGIN_EDIT_REPLACE, BEGIN_EDIT_PREFILL, BEGIN_EDIT_MODES
from exceptions import ConfigurationError
from logger import get_logger


class Mode(Enum):
    BROWSING = "browsing"
    EDITING = "editing"


class Action(Enum):
    """What the event loop should do after a key was handled"""
    CONTINUE = "continue"
    QUIT = "quit"


QUIT_KEYS = ("ctrl+c", "esc", "enter")
PREVIOUS_KEYS = ("left", "up", "shift+tab")
NEXT_KEYS = ("right", "down", "tab")


def is_edit_trigger(key: str) -> bool:
    """Only ASCII letters and digits start an edit while browsing"""
    return len(key) == 1 and key.isascii() and key.isalnum()


def is_insertable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


@dataclass
class EditSession:
    """Text buffer and cursor of an in-progress edit"""
    buffer: str = ""
    cursor: int = 0
    segments: Optional[List[str]] = None  # Split value of a composite parameter

    def __post_init__(self):
        self._check()

    def _check(self):
        if not 0 <= self.cursor <= len(self.buffer):
            raise AssertionError(f"cursor {self.cursor} outside buffer of length {len(self.buffer)}")

    def insert(self, text: str):
        self.buffer = self.buffer[:self.cursor] + text + self.buffer[self.cursor:]
        self.cursor += len(text)
        self._check()

    def delete_left(self):
        if self.cursor > 0:
            self.buffer = self.buffer[:self.cursor - 1] + self.buffer[self.cursor:]
            self.cursor -= 1
        self._check()

    def move_left(self):
        self.cursor = max(0, self.cursor - 1)
        self._check()

    def move_right(self):
        self.cursor = min(len(self.buffer), self.cursor + 1)
        self._check()


@dataclass
class EditorModel:
    """Complete state of one interactive editing session"""
    image: str
    parameters: List[ParameterInstance] = field(default_factory=list)
    flags: List[RunFlag] = field(default_factory=list)
    selected: int = 0
    mode: Mode = Mode.BROWSING
    session: Optional[EditSession] = None
    error: Optional[Exception] = None
    begin_edit: str = BEGIN_EDIT_REPLACE

    def __post_init__(self):
        if self.begin_edit not in BEGIN_EDIT_MODES:
            raise ConfigurationError(f"Unknown begin-edit mode {self.begin_edit!r}")
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_catalog(cls, catalog: Catalog, image: str, begin_edit: str = BEGIN_EDIT_REPLACE) -> 'EditorModel':
        return cls(
            image=image,
            parameters=catalog.parameters_for(image),
            flags=catalog.flags_for(image),
            begin_edit=begin_edit,
        )

    @property
    def current(self) -> Optional[ParameterInstance]:
        if not self.parameters:
            return None
        return self.parameters[self.selected]

    @property
    def editing(self) -> bool:
        return self.mode is Mode.EDITING

    def fail(self, error: Exception) -> Action:
        """Record an unrecoverable session error; the session ends"""
        self.logger.error(f"Session error: {error}")
        self.error = error
        return Action.QUIT

    def update(self, key: str) -> Action:
        """Apply one key event to the state"""
        if self.editing:
            return self._update_editing(key)
        return self._update_browsing(key)

    # Browsing

    def _update_browsing(self, key: str) -> Action:
        if key in QUIT_KEYS:
            return Action.QUIT
        if not self.parameters:
            return Action.CONTINUE

        if key in PREVIOUS_KEYS:
            self.select_previous()
        elif key in NEXT_KEYS:
            self.select_next()
        elif is_edit_trigger(key):
            self._begin_edit(key)
        return Action.CONTINUE

    def select_previous(self):
        if self.selected > 0:
            self.selected -= 1
        else:
            self.selected = len(self.parameters) - 1

    def select_next(self):
        if self.selected < len(self.parameters) - 1:
            self.selected += 1
        else:
            self.selected = 0

    def _begin_edit(self, first_char: str):
        param = self.current
        # Working copy only: the instance stays defaulted until a commit
        value = param.value or param.default

        segments = None
        editable = value
        if param.param_type.is_composite:
            segments = value.split(param.param_type.split_on)
            while len(segments) <= param.param_type.editable_index:
                segments.append("")
            editable = segments[param.param_type.editable_index]

        session = EditSession(segments=segments)
        if self.begin_edit == BEGIN_EDIT_PREFILL:
            session.insert(editable)
        session.insert(first_char)

        self.session = session
        self.mode = Mode.EDITING
        self.logger.debug(f"Editing {param.param_type.name} (segments={segments})")

    # Editing

    def _update_editing(self, key: str) -> Action:
        session = self.session
        if key == "enter":
            self._commit()
        elif key == "tab":
            self._commit()
            self.select_next()
        elif key == "esc":
            self._leave_edit()
        elif key == "backspace":
            session.delete_left()
        elif key == "left":
            session.move_left()
        elif key == "right":
            session.move_right()
        elif is_insertable(key):
            session.insert(key)
        return Action.CONTINUE

    def _commit(self):
        param = self.current
        session = self.session
        if session.segments is not None:
            segments = list(session.segments)
            segments[param.param_type.editable_index] = session.buffer
            value = param.param_type.split_on.join(segments)
        else:
            value = session.buffer

        param.value = value or param.default
        self.logger.debug(f"Committed {param.param_type.name}={param.value!r}")
        self._leave_edit()

    def _leave_edit(self):
        self.session = None
        self.mode = Mode.BROWSING
