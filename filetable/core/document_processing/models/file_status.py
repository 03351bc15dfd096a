"""
File status state machine.

Closed set of states a workflow file moves through while the pipeline
runs. The persisted representation stays the free-text string the file
list renders ("Analyzing", "Error: <msg>", ...); in code every status
is a FileStatus value and every change goes through transition().

Lifecycle: Uploaded -> Analyzing -> Suggesting columns -> Ready,
or Error(message) from any state. Error is terminal until the file is
explicitly re-triggered, which moves it back to Analyzing.

Dependencies: filetable.core.exceptions
System role: Status transitions for the file analysis pipeline
"""

from dataclasses import dataclass
from enum import Enum

from filetable.core.exceptions import InvalidStatusTransitionError

ERROR_PREFIX = "Error: "
MAX_ERROR_MESSAGE_LENGTH = 2000


class FileStatusKind(str, Enum):
    """Processing states of a workflow file."""

    UPLOADED = "Uploaded"
    ANALYZING = "Analyzing"
    SUGGESTING_COLUMNS = "Suggesting columns"
    READY = "Ready"
    ERROR = "Error"


@dataclass(frozen=True)
class FileStatus:
    """A status value; message is set only for ERROR."""

    kind: FileStatusKind
    message: str | None = None

    def __post_init__(self) -> None:
        if (self.kind is FileStatusKind.ERROR) != (self.message is not None):
            raise ValueError("message is required for ERROR and forbidden otherwise")

    @classmethod
    def uploaded(cls) -> "FileStatus":
        return cls(FileStatusKind.UPLOADED)

    @classmethod
    def analyzing(cls) -> "FileStatus":
        return cls(FileStatusKind.ANALYZING)

    @classmethod
    def suggesting_columns(cls) -> "FileStatus":
        return cls(FileStatusKind.SUGGESTING_COLUMNS)

    @classmethod
    def ready(cls) -> "FileStatus":
        return cls(FileStatusKind.READY)

    @classmethod
    def error(cls, message: str) -> "FileStatus":
        """Build an error status, truncating oversized messages."""
        message = message or "Unknown error"
        return cls(FileStatusKind.ERROR, message[:MAX_ERROR_MESSAGE_LENGTH])

    @property
    def is_terminal(self) -> bool:
        return self.kind in (FileStatusKind.READY, FileStatusKind.ERROR)

    def to_string(self) -> str:
        """Render the persisted status string."""
        if self.kind is FileStatusKind.ERROR:
            return f"{ERROR_PREFIX}{self.message}"
        return self.kind.value

    @classmethod
    def parse(cls, raw: str | None) -> "FileStatus":
        """
        Parse a persisted status string.

        Unknown strings (legacy "Processing", "Processed", ...) are mapped
        onto the closest state rather than rejected so old rows stay readable.

        Args:
            raw: Status string stored on the file entry

        Returns:
            FileStatus: Parsed status
        """
        if not raw:
            return cls.uploaded()
        if raw.startswith(ERROR_PREFIX):
            return cls.error(raw[len(ERROR_PREFIX):])
        for kind in FileStatusKind:
            if kind is not FileStatusKind.ERROR and raw == kind.value:
                return cls(kind)
        legacy = {"Processing": cls.analyzing(), "Processed": cls.ready()}
        return legacy.get(raw, cls.uploaded())


_ALLOWED: dict[FileStatusKind, frozenset[FileStatusKind]] = {
    FileStatusKind.UPLOADED: frozenset({FileStatusKind.ANALYZING}),
    FileStatusKind.ANALYZING: frozenset(
        {FileStatusKind.ANALYZING, FileStatusKind.SUGGESTING_COLUMNS}
    ),
    # a re-delivered trigger restarts the run from Analyzing
    FileStatusKind.SUGGESTING_COLUMNS: frozenset(
        {
            FileStatusKind.ANALYZING,
            FileStatusKind.SUGGESTING_COLUMNS,
            FileStatusKind.READY,
        }
    ),
    FileStatusKind.READY: frozenset({FileStatusKind.ANALYZING, FileStatusKind.READY}),
    FileStatusKind.ERROR: frozenset({FileStatusKind.ANALYZING}),
}


def can_transition(current: FileStatus, requested: FileStatus) -> bool:
    """Whether requested is reachable from current in one step."""
    if requested.kind is FileStatusKind.ERROR:
        return True
    return requested.kind in _ALLOWED[current.kind]


def transition(current: FileStatus, requested: FileStatus) -> FileStatus:
    """
    Validate a status change.

    Args:
        current: Status currently persisted
        requested: Status the pipeline wants to write

    Returns:
        FileStatus: requested, when the move is legal

    Raises:
        InvalidStatusTransitionError: Move is not allowed
    """
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(current.to_string(), requested.to_string())
    return requested
