"""
Release notes generator — Internal assertion failures.

AssertFailure is raised when an internal invariant check fails. It
carries a dump of every live thread's stack taken at the moment it
was raised, or a short explanation when the interpreter cannot
provide one.
"""

from __future__ import annotations

import sys
import threading
import traceback

from relnotes.errors import RelNotesError

NO_THREAD_DUMP = "(Skipping thread dump because it is not supported on this platform)"


def dump_threads() -> str | None:
    """Return stack traces for all live threads, or None if unsupported."""
    current_frames = getattr(sys, "_current_frames", None)
    if current_frames is None:
        return None
    try:
        frames = current_frames()
    except (RuntimeError, PermissionError):
        return None

    names = {thread.ident: thread for thread in threading.enumerate()}
    lines = ["---------------", "Stack traces for all live threads:"]
    for ident, frame in frames.items():
        thread = names.get(ident)
        if thread is not None:
            lines.append(
                f'Thread name={thread.name} id={ident} daemon={thread.daemon}'
            )
        else:
            lines.append(f"Thread id={ident}")
        lines.extend(line.rstrip("\n") for line in traceback.format_stack(frame))
        lines.append("")
    lines.append("---------------")
    return "\n".join(lines)


class AssertFailure(RelNotesError):
    def __init__(self, message: str):
        super().__init__(
            code="ASSERT_FAILED",
            message=message,
            suggestion="This is a bug in the release notes generator. Please report it with the thread dump.",
        )
        self.thread_dump = dump_threads() or NO_THREAD_DUMP

    def format_report(self) -> str:
        """The exception's own traceback followed by the thread dump."""
        trace = "".join(traceback.format_exception(type(self), self, self.__traceback__))
        return f"{trace}{self.thread_dump}\n"
