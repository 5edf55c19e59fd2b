"""Tests for single-slot attachment staging."""

from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from farm_assistant.attachments import (
    AttachmentStager,
    attachment_kind,
    validate_attachment_path,
)
from farm_assistant.exceptions import AttachmentValidationError
from farm_assistant.models import Attachment

FIELD_A = Attachment(kind="image", reference="/tmp/a.jpg", display_name="a.jpg")
FIELD_B = Attachment(kind="document", reference="/tmp/b.pdf", display_name="b.pdf")


class AttachmentStagerTests(unittest.TestCase):
    """Validate stage/consume semantics."""

    def test_new_selection_replaces_previous(self) -> None:
        stager = AttachmentStager()
        stager.stage(FIELD_A)
        stager.stage(FIELD_B)
        self.assertIs(stager.staged, FIELD_B)

    def test_consume_returns_and_clears(self) -> None:
        stager = AttachmentStager()
        stager.stage(FIELD_A)
        self.assertIs(stager.consume(), FIELD_A)
        self.assertFalse(stager.has_staged())
        self.assertIsNone(stager.consume())

    def test_change_callbacks_fire_on_stage_and_consume(self) -> None:
        stager = AttachmentStager()
        seen: list[Attachment | None] = []
        stager.on_change(seen.append)
        stager.stage(FIELD_A)
        stager.consume()
        stager.consume()
        self.assertEqual(seen, [FIELD_A, None])


class AttachmentPathTests(unittest.TestCase):
    """Validate file selection checks."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def _write(self, name: str, size: int = 16) -> Path:
        path = self.root / name
        path.write_bytes(b"x" * size)
        return path

    def test_stage_path_builds_descriptor(self) -> None:
        path = self._write("Soil Analysis Report.jpg")
        stager = AttachmentStager()
        descriptor = stager.stage_path(str(path))
        self.assertEqual(descriptor.kind, "image")
        self.assertEqual(descriptor.display_name, "Soil Analysis Report.jpg")
        self.assertEqual(descriptor.reference, str(path.resolve()))
        self.assertIs(stager.staged, descriptor)

    def test_documents_are_classified(self) -> None:
        self.assertEqual(attachment_kind(Path("yield.xlsx")), "document")
        self.assertEqual(attachment_kind(Path("field.PNG")), "image")

    def test_missing_file_is_rejected(self) -> None:
        with self.assertRaises(AttachmentValidationError):
            validate_attachment_path(str(self.root / "missing.pdf"))

    def test_directory_is_rejected(self) -> None:
        with self.assertRaises(AttachmentValidationError):
            validate_attachment_path(str(self.root))

    def test_unsupported_extension_is_rejected(self) -> None:
        path = self._write("notes.exe")
        with self.assertRaises(AttachmentValidationError):
            validate_attachment_path(str(path))

    def test_oversized_file_is_rejected_and_slot_unchanged(self) -> None:
        path = self._write("big.pdf", size=64)
        stager = AttachmentStager(max_bytes=32)
        with self.assertRaises(AttachmentValidationError):
            stager.stage_path(str(path))
        self.assertIsNone(stager.staged)

    def test_blank_path_is_rejected(self) -> None:
        with self.assertRaises(AttachmentValidationError):
            validate_attachment_path("  ")


if __name__ == "__main__":
    unittest.main()
