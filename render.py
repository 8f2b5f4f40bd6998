"""
Live preview of the command being assembled.
"""

from typing import List

from rich.text import Text

from catalog import ParameterInstance
from constants import DEFAULT_PROGRAM, DEFAULT_WRAP_WIDTH, CONTINUATION_INDENT
from editor import EditorModel, Mode

SELECTED_STYLE = "bright_blue"
MODIFIED_STYLE = "dim yellow"
MUTED_STYLE = "bright_black"
CURSOR_STYLE = "reverse"
ERROR_STYLE = "red"

BROWSING_LEGEND = "↑/↓/←/→: Navigate | Tab: Next | Type: Edit | Enter: Execute | Esc: Quit"
EDITING_LEGEND = "Enter: Confirm | Tab: Confirm and Next | Esc: Cancel"


def legend(mode: Mode) -> Text:
    """Key bindings active in the given mode"""
    return Text(EDITING_LEGEND if mode is Mode.EDITING else BROWSING_LEGEND, style=MUTED_STYLE)


def _render_editing(param: ParameterInstance, model: EditorModel) -> Text:
    session = model.session
    ptype = param.param_type
    before_part = ""
    after_part = ""
    if session.segments is not None:
        index = ptype.editable_index
        if index > 0:
            before_part = ptype.split_on.join(session.segments[:index]) + ptype.split_on
        if index + 1 < len(session.segments):
            after_part = ptype.split_on + ptype.split_on.join(session.segments[index + 1:])

    buffer, cursor = session.buffer, session.cursor
    # Blank reverse cell when the cursor sits past the last character
    cursor_char = buffer[cursor] if cursor < len(buffer) else " "

    text = Text(f"{ptype.name} ")
    text.append(before_part)
    text.append(buffer[:cursor], style=SELECTED_STYLE)
    text.append(cursor_char, style=CURSOR_STYLE)
    text.append(buffer[cursor + 1:], style=SELECTED_STYLE)
    text.append(after_part, style=MUTED_STYLE)
    return text


def render_parameter(index: int, param: ParameterInstance, model: EditorModel) -> Text:
    """Render one parameter with the treatment its state calls for"""
    selected = index == model.selected
    if selected and model.mode is Mode.EDITING and model.session is not None:
        return _render_editing(param, model)

    content = f"{param.param_type.name} {param.display_value}"
    if selected:
        return Text(content, style=SELECTED_STYLE)
    if param.is_edited:
        return Text(content, style=MODIFIED_STYLE)
    return Text(content)


def assemble_command(parts: List[Text], wrap_width: int = DEFAULT_WRAP_WIDTH) -> Text:
    """Join command tokens on one line, or with continuations if it gets too wide"""
    command = Text(" ").join(parts)
    if command.cell_len > wrap_width:
        separator = Text()
        separator.append(" \\", style=MUTED_STYLE)
        separator.append("\n" + CONTINUATION_INDENT)
        command = separator.join(parts)
    return command


def render(model: EditorModel, wrap_width: int = DEFAULT_WRAP_WIDTH, program: str = DEFAULT_PROGRAM) -> Text:
    """Build the full display for the current state"""
    if model.error is not None:
        return Text(f"{model.error}\n", style=ERROR_STYLE)

    parts = [Text(program, style=MUTED_STYLE)]
    parts.extend(Text(flag.value, style=MUTED_STYLE) for flag in model.flags)
    parts.extend(render_parameter(i, param, model) for i, param in enumerate(model.parameters))
    parts.append(Text(model.image, style=MUTED_STYLE))

    display = assemble_command(parts, wrap_width)
    display.append("\n\n")
    display.append_text(legend(model.mode))
    return display


def render_plain(model: EditorModel, wrap_width: int = DEFAULT_WRAP_WIDTH, program: str = DEFAULT_PROGRAM) -> str:
    """The rendered display without styling"""
    return render(model, wrap_width, program).plain
