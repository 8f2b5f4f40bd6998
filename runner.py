"""
Event loop driving an editing session, and the run_tui entry point.
"""

import threading
from typing import Optional, Protocol, Tuple

from rich.console import Console

from catalog import Catalog
from committer import FlagSet, RunOptions, ContainerOptions, RunSelection, collect, apply_selection
from config import Config
from constants import BEGIN_EDIT_REPLACE, CLEAR_SCREEN, DEFAULT_PROGRAM, DEFAULT_WRAP_WIDTH
from editor import Action, EditorModel
from exceptions import SessionCancelled, SessionError, UnexpectedStateError
from keys import TerminalKeySource
from logger import get_logger, hold_log_output
from render import render

logger = get_logger("runner")


class KeySource(Protocol):
    def read_key(self) -> str: ...


def _draw(console: Console, model: EditorModel, wrap_width: int, program: str):
    # Raw mode turns off output post-processing, so lines need explicit CRs
    console.file.write(CLEAR_SCREEN)
    with console.capture() as capture:
        console.print(render(model, wrap_width, program))
    console.file.write(capture.get().replace("\n", "\r\n"))
    console.file.flush()


def run_editor(model: EditorModel, key_source: KeySource, console: Console, *,
               wrap_width: int = DEFAULT_WRAP_WIDTH, program: str = DEFAULT_PROGRAM,
               cancel_event: Optional[threading.Event] = None) -> EditorModel:
    """Feed keys to the model until it asks to quit; returns the final model"""
    logger.debug(f"Starting session for {model.image!r} with {len(model.parameters)} parameter(s)")
    while True:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Session cancelled")
            raise SessionCancelled("Session cancelled")

        _draw(console, model, wrap_width, program)

        try:
            key = key_source.read_key()
        except SessionError as e:
            model.fail(e)
            _draw(console, model, wrap_width, program)
            return model

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Session cancelled")
            raise SessionCancelled("Session cancelled")

        logger.debug(f"Key {key!r} in {model.mode.value} mode")
        if model.update(key) is Action.QUIT:
            return model


def run_session(image: str, *, catalog: Optional[Catalog] = None, config: Optional[Config] = None,
                console: Optional[Console] = None, key_source: Optional[KeySource] = None,
                cancel_event: Optional[threading.Event] = None) -> RunSelection:
    """Run the interactive editor for an image and return what was chosen"""
    catalog = catalog or Catalog.default()
    console = console or Console()
    wrap_width = config.wrap_width if config else DEFAULT_WRAP_WIDTH
    program = config.get('display.program', DEFAULT_PROGRAM) if config else DEFAULT_PROGRAM
    begin_edit = config.begin_edit if config else BEGIN_EDIT_REPLACE

    model = EditorModel.from_catalog(catalog, image, begin_edit=begin_edit)

    if key_source is None:
        # Log records are held until the terminal leaves raw mode
        with hold_log_output(), TerminalKeySource(cancel_event=cancel_event) as terminal:
            final = run_editor(model, terminal, console, wrap_width=wrap_width,
                               program=program, cancel_event=cancel_event)
    else:
        final = run_editor(model, key_source, console, wrap_width=wrap_width,
                           program=program, cancel_event=cancel_event)

    if not isinstance(final, EditorModel):
        raise UnexpectedStateError("unexpected model type")
    if final.error is not None:
        if isinstance(final.error, SessionError):
            raise final.error
        raise SessionError(str(final.error))
    return collect(final)


def run_tui(image: str, flag_set: FlagSet, run_options: RunOptions, container_options: ContainerOptions,
            **session_kwargs) -> Tuple[FlagSet, RunOptions, ContainerOptions]:
    """Run the editor and commit the result to the option structures

    Nothing is written when the session fails or is cancelled.
    """
    selection = run_session(image, **session_kwargs)
    apply_selection(selection, flag_set, run_options, container_options)
    return flag_set, run_options, container_options
