"""Custom exceptions for Superscript services."""


class SuperscriptError(Exception):
    """Base class for errors surfaced by the persistence coordinators.

    Attributes:
        path: File or directory the failed operation targeted
        message: Human-readable error message
    """

    default_message = "Operation failed"

    def __init__(self, path: str, message: str | None = None):
        """Initialize the error.

        Args:
            path: File or directory the failed operation targeted
            message: Human-readable error message
        """
        self.path = path
        self.message = message or self.default_message
        super().__init__(f"{self.message}: {path}")


class DirectoryUnavailable(SuperscriptError):
    """Raised when the notes folder cannot be listed.

    The caller is expected to ask the user to pick another folder.
    """

    default_message = "Folder is not readable"


class WriteFailed(SuperscriptError):
    """Raised when a foreground save or rename could not reach the disk."""

    default_message = "Could not save document"


class ReadFailed(SuperscriptError):
    """Raised when a document selected for opening cannot be read."""

    default_message = "Could not read document"


class DeleteFailed(SuperscriptError):
    """Raised when the active document could not be removed."""

    default_message = "Could not delete document"
