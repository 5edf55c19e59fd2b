"""Single-slot staging of the file selected for the next outgoing turn.

Selecting a file only records a reference to it; nothing is uploaded. At most
one attachment may be staged: a new selection silently replaces the previous
one, and the send path consumes the slot so a file rides along with exactly
one turn.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path

from .exceptions import AttachmentValidationError
from .models import Attachment

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif"}
)
DOCUMENT_EXTENSIONS: frozenset[str] = frozenset(
    {".pdf", ".doc", ".docx", ".xls", ".xlsx"}
)
ALLOWED_EXTENSIONS: frozenset[str] = IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


def attachment_kind(path: Path) -> str:
    """Return ``"image"`` or ``"document"`` based on the file extension."""
    return "image" if path.suffix.lower() in IMAGE_EXTENSIONS else "document"


def validate_attachment_path(
    raw_path: str,
    *,
    max_bytes: int = DEFAULT_MAX_BYTES,
    allowed_extensions: frozenset[str] = ALLOWED_EXTENSIONS,
) -> Path:
    """Resolve and check a selected file, returning its absolute path.

    Raises:
        AttachmentValidationError: when the file is missing, not a regular
            file, of an unsupported type, or larger than ``max_bytes``.
    """
    if not raw_path or not raw_path.strip():
        raise AttachmentValidationError("No file selected.")
    try:
        resolved = Path(raw_path.strip()).expanduser().resolve()
        if not resolved.exists():
            raise AttachmentValidationError(f"File not found: {raw_path}")
        if not resolved.is_file():
            raise AttachmentValidationError(f"Not a file: {raw_path}")
        if resolved.suffix.lower() not in allowed_extensions:
            exts = ", ".join(sorted(allowed_extensions))
            raise AttachmentValidationError(f"Unsupported file type. Allowed: {exts}")
        size = resolved.stat().st_size
    except OSError as exc:
        raise AttachmentValidationError(f"Error reading file: {exc}") from exc

    if size > max_bytes:
        max_mb = max_bytes / (1024 * 1024)
        raise AttachmentValidationError(f"File too large (max {max_mb:.1f}MB)")
    return resolved


class AttachmentStager:
    """Hold at most one attachment descriptor awaiting the next send."""

    def __init__(
        self,
        *,
        max_bytes: int = DEFAULT_MAX_BYTES,
        allowed_extensions: frozenset[str] = ALLOWED_EXTENSIONS,
    ) -> None:
        self.max_bytes = max_bytes
        self.allowed_extensions = allowed_extensions
        self._staged: Attachment | None = None
        self._on_change: list[Callable[[Attachment | None], None]] = []

    @property
    def staged(self) -> Attachment | None:
        return self._staged

    def has_staged(self) -> bool:
        return self._staged is not None

    def on_change(self, callback: Callable[[Attachment | None], None]) -> None:
        """Register a callback invoked whenever the slot changes."""
        self._on_change.append(callback)

    def stage(self, descriptor: Attachment) -> None:
        """Stage ``descriptor``, discarding any previous selection."""
        if self._staged is not None:
            LOGGER.info(
                "attachment.replaced",
                extra={
                    "event": "attachment.replaced",
                    "previous": self._staged.display_name,
                    "current": descriptor.display_name,
                },
            )
        self._staged = descriptor
        self._notify()

    def stage_path(self, raw_path: str) -> Attachment:
        """Validate a selected file and stage it."""
        resolved = validate_attachment_path(
            raw_path,
            max_bytes=self.max_bytes,
            allowed_extensions=self.allowed_extensions,
        )
        descriptor = Attachment(
            kind=attachment_kind(resolved),
            reference=str(resolved),
            display_name=resolved.name,
        )
        self.stage(descriptor)
        return descriptor

    def consume(self) -> Attachment | None:
        """Return the staged descriptor (if any) and clear the slot."""
        descriptor = self._staged
        if descriptor is None:
            return None
        self._staged = None
        self._notify()
        return descriptor

    def _notify(self) -> None:
        for callback in list(self._on_change):
            try:
                callback(self._staged)
            except Exception as exc:
                LOGGER.error(f"Attachment change callback failed: {exc}")
