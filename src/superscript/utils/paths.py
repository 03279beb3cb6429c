"""Path helpers for note and canvas file identifiers.

Paths are plain ``/``-separated strings, the same identifiers the directory
index hands out. Nothing here touches the filesystem.
"""

from typing import Iterable, Literal

NOTE_EXTENSION = ".md"
CANVAS_EXTENSION = ".excalidraw"
DOCUMENT_EXTENSIONS = (NOTE_EXTENSION, CANVAS_EXTENSION)

DocumentKind = Literal["note", "canvas"]


def parent(path: str) -> str:
    """Return the directory part of a path.

    Returns an empty string when there is no separator after position 0,
    so ``"/note.md"`` and ``"note.md"`` both have no usable parent.
    """
    index = path.rfind("/")
    return path[:index] if index > 0 else ""


def file_name(path: str) -> str:
    """Return the last path component."""
    index = path.rfind("/")
    return path if index == -1 else path[index + 1:]


def known_extension(name: str, extensions: Iterable[str] = DOCUMENT_EXTENSIONS) -> str | None:
    """Return the document extension ``name`` ends with, if any (case-insensitive).

    The longest matching extension wins, so ``.tar.md`` beats ``.md``.
    """
    lowered = name.lower()
    for extension in sorted(extensions, key=len, reverse=True):
        if lowered.endswith(extension.lower()):
            return extension
    return None


def stem(path: str, extensions: Iterable[str] = DOCUMENT_EXTENSIONS) -> str:
    """Return the file name without its document extension."""
    name = file_name(path)
    extension = known_extension(name, extensions)
    return name[: -len(extension)] if extension else name


def display_name(path: str, extensions: Iterable[str] = DOCUMENT_EXTENSIONS) -> str:
    """Return the name shown for a document in titles and the file finder."""
    return stem(path, extensions)


def document_kind(path: str) -> DocumentKind:
    """Classify a path as a note or a drawing canvas by its extension."""
    return "canvas" if known_extension(file_name(path)) == CANVAS_EXTENSION else "note"


def join(directory: str, name: str) -> str:
    """Join a directory and a file name with a single separator."""
    return f"{directory.rstrip('/')}/{name}"
