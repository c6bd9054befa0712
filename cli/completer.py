"""Custom completer for the LAN NAS CLI with local file autocompletion."""

import os
from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, UPLOAD_PATH_FLAG


class NasCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for the 'upload' command
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.

        For the first token, completes command names.
        For 'upload' arguments, completes local files and directories.
        Nothing is completed for the remote directory after --to.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        previous = tokens[-1] if is_typing_new_token else (tokens[-2] if len(tokens) > 1 else "")
        if previous == UPLOAD_PATH_FLAG:
            return

        current_word = "" if is_typing_new_token else tokens[-1]

        if current_word.startswith("-"):
            if UPLOAD_PATH_FLAG.startswith(current_word) and UPLOAD_PATH_FLAG not in tokens:
                yield Completion(UPLOAD_PATH_FLAG, start_position=-len(current_word))
            return

        yield from self._complete_local_paths(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_local_paths(self, partial: str) -> Iterable[Completion]:
        """
        Complete file and directory names for the partial path.

        Directories are suggested with a trailing slash so completion can
        continue inside them. Hidden entries are only offered once the
        partial name starts with a dot.
        """
        base = self.base_dir or Path.cwd()
        dir_part, name_part = os.path.split(partial)
        search_dir = base / os.path.expanduser(dir_part) if dir_part else base

        try:
            entries = sorted(search_dir.iterdir(), key=lambda p: p.name)
        except OSError:
            return

        for entry in entries:
            if not entry.name.startswith(name_part):
                continue
            if entry.name.startswith(".") and not name_part.startswith("."):
                continue
            suffix = "/" if entry.is_dir() else ""
            completion = os.path.join(dir_part, entry.name) + suffix
            yield Completion(
                completion,
                start_position=-len(partial),
                display=entry.name + suffix,
            )
