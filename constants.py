"""Constants used throughout the run-tui tool"""

# Command assembly
DEFAULT_PROGRAM = "docker run"
DEFAULT_WRAP_WIDTH = 80
CONTINUATION_INDENT = "    "

# Begin-edit behaviour
BEGIN_EDIT_REPLACE = "replace"
BEGIN_EDIT_PREFILL = "prefill"
BEGIN_EDIT_MODES = (BEGIN_EDIT_REPLACE, BEGIN_EDIT_PREFILL)

# Terminal
ESCAPE_TIMEOUT = 0.05  # seconds to wait for the rest of an escape sequence
CANCEL_POLL_INTERVAL = 0.1  # seconds between cancellation checks while waiting for a key
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CLEAR_SCREEN = "\033[H\033[2J"

# Configuration
CONFIG_DIR = ".config/run-tui"
CONFIG_FILE = "config.yaml"
DEFAULT_LOG_LEVEL = "WARNING"

# Application metadata
APP_NAME = "run-tui"
APP_VERSION = "0.1.0"
APP_DESCRIPTION = "Interactively assemble container run commands in the terminal"
