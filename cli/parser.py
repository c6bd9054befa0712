"""Command parser for CLI input."""

import shlex

from cli.constants import UPLOAD_PATH_FLAG
from cli.models import CleanupCommand, CommandRequest, StatusCommand, UploadCommand


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/Status/Cleanup)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "status":
        return _parse_status(tokens[1:])
    elif command_name == "cleanup":
        return _parse_cleanup(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload file-list [--to dir]' command."""
    file_list = []
    upload_path = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == UPLOAD_PATH_FLAG:
            if i + 1 >= len(args):
                raise ParseError(f"{UPLOAD_PATH_FLAG} requires a destination directory")
            if upload_path is not None:
                raise ParseError(f"{UPLOAD_PATH_FLAG} given more than once")
            upload_path = args[i + 1]
            i += 2
            continue
        file_list.append(arg)
        i += 1

    if not file_list:
        raise ParseError("upload requires at least one file")

    return UploadCommand(file_list=tuple(file_list), upload_path=upload_path)


def _parse_status(args: list[str]) -> StatusCommand:
    """Parse 'status' command."""
    if args:
        raise ParseError("status takes no arguments")
    return StatusCommand()


def _parse_cleanup(args: list[str]) -> CleanupCommand:
    """Parse 'cleanup [max_age_seconds]' command."""
    if len(args) > 1:
        raise ParseError("cleanup takes at most one argument")
    if not args:
        return CleanupCommand()

    try:
        max_age = int(args[0])
    except ValueError:
        raise ParseError(f"max_age_seconds must be an integer, got '{args[0]}'")
    if max_age < 0:
        raise ParseError("max_age_seconds must not be negative")

    return CleanupCommand(max_age_seconds=max_age)
