"""Error types for Tagshelf.

Content errors are recoverable: the offending document is left out of the
navigation index and the rest of the site still builds. Configuration and
template errors stop the build.

Classes:
    TagshelfError: Base class for all Tagshelf errors.
    ContentError: A problem with one source document.
    MalformedDocument: Missing required field, unparsable value, unknown layout.
    DuplicatePath: Two documents claim the same identifier.
    ConfigError: The project configuration cannot be read.
    BuildError: A template failed while rendering a document.
"""

from __future__ import annotations


class TagshelfError(Exception):
    """Base class for all Tagshelf errors."""


class ContentError(TagshelfError):
    """Error in a single source document.

    Attributes:
        source_path: Identifier of the offending document.
        message: Human-readable error message.
    """

    def __init__(self, source_path: str, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


class MalformedDocument(ContentError):
    """A document is missing a required field or declares an invalid value."""


class DuplicatePath(ContentError):
    """A document claims an identifier already held by another document.

    Attributes:
        existing: Path of the document that claimed a URL first; empty for
            a repeated path.
    """

    def __init__(self, source_path: str, message: str, existing: str = ""):
        self.existing = existing
        super().__init__(source_path, message)


class ConfigError(TagshelfError):
    """The project configuration file is unreadable or invalid."""


class BuildError(TagshelfError):
    """Error during site build with file context.

    Attributes:
        source_path: Path of the document that was being rendered.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")
