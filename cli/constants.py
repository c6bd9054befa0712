"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "status", "cleanup", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#3B82F6 bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;59;130;246m"
GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
 ██╗      █████╗ ███╗   ██╗    ███╗   ██╗ █████╗ ███████╗
 ██║     ██╔══██╗████╗  ██║    ████╗  ██║██╔══██╗██╔════╝
 ██║     ███████║██╔██╗ ██║    ██╔██╗ ██║███████║███████╗
 ██║     ██╔══██║██║╚██╗██║    ██║╚██╗██║██╔══██║╚════██║
 ███████╗██║  ██║██║ ╚████║    ██║ ╚████║██║  ██║███████║
 ╚══════╝╚═╝  ╚═╝╚═╝  ╚═══╝    ╚═╝  ╚═══╝╚═╝  ╚═╝╚══════╝
{RESET}"""

WELCOME_TITLE = "LAN NAS CLI - Local network file uploads"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "lannas> "

UPLOAD_PATH_FLAG = "--to"

HELP_TEXT = """Available commands:
  upload <file> [file ...] [--to <dir>]   Upload files (large files are sent in chunks)
  status                                  Show server upload configuration
  cleanup [max_age_seconds]               Remove orphaned temp files on the server
  clear                                   Clear screen and redisplay welcome message
  help                                    Show this help
  exit                                    Exit REPL

Destination directories are relative to the server's storage root.
Examples:
  upload report.pdf
  upload movie.mkv photos/cat.png --to /Videos
  cleanup 3600"""
