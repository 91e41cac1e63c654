"""Custom exceptions for image loading.

These exceptions wrap low-level Pillow errors with meaningful messages.
They are only raised at the I/O edge; the selection core never sees them.
"""

from pathlib import Path


class ImagingError(Exception):
    """Base exception for all image-related errors."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize imaging error with optional path context.

        Args:
            message: Human-readable error description.
            path: Path to the image file that caused the error.
        """
        self.path = Path(path) if path else None
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with path context if available."""
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class ImageOpenError(ImagingError):
    """Raised when an image file cannot be opened.

    This error is raised when:
    - The file does not exist
    - The file extension is not supported
    - Pillow fails to identify or decode the file
    """
