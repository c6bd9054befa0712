"""Interactive prompt and one-shot command execution."""

import os
import sys
from typing import Callable, Dict

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import handle_cleanup, handle_status, handle_upload
from cli.completer import NasCompleter
from cli.constants import HELP_TEXT, LOGO, PROMPT_TEXT, STYLE, WELCOME_HELP, WELCOME_TITLE
from cli.models import CommandRequest
from cli.parser import ParseError, parse_command

HANDLERS: Dict[str, Callable[..., str]] = {
    "upload": handle_upload,
    "status": handle_status,
    "cleanup": handle_cleanup,
}


def clear_screen() -> None:
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj: CommandRequest) -> str:
    """Route a parsed command to its handler by its ``command`` tag."""
    handler = HANDLERS.get(cmd_obj.command)
    if handler is None:
        return f"Unknown command type: {type(cmd_obj).__name__}"
    return handler(cmd_obj)


def run_once(user_input: str) -> str:
    """Parse and run a single command line, returning its output."""
    try:
        return dispatch_command(parse_command(user_input))
    except ParseError as e:
        return f"Error: {e}"


def repl_loop() -> None:
    """
    Read commands until 'exit' or EOF.

    'help', 'clear' and 'exit' are handled here; everything else goes
    through the parser. Ctrl-C abandons the current line only.
    """
    session: PromptSession = PromptSession(
        completer=NasCompleter(), history=InMemoryHistory(), style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            return

        if not line:
            continue
        if line == "exit":
            print("Goodbye!")
            return
        if line == "help":
            print(HELP_TEXT)
        elif line == "clear":
            clear_screen()
            show_welcome()
        else:
            try:
                print(run_once(line))
            except KeyboardInterrupt:
                print("\nInterrupted")
