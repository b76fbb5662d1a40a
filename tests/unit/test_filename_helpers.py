"""
Unit tests for output file naming.
"""

import pytest

from transmute.config import FileType
from transmute.utils.filename_helpers import derive_output_name, file_stem, resolve_output_subtype


class TestFileStem:

    @pytest.mark.parametrize("filename,expected", [
        ("report.docx", "report"),
        ("a.b.c.png", "a.b.c"),
        ("noext", "noext"),
        ("dir/sub/photo.jpg", "photo"),
        ("C:\\Users\\me\\photo.jpg", "photo"),
        ("", "converted"),
        (".hidden", "converted"),
        (None, "converted"),
    ])
    def test_file_stem(self, filename, expected):
        assert file_stem(filename) == expected


class TestOutputNaming:

    @pytest.mark.parametrize("original,target,expected", [
        ("photo.jpg", "png", "photo.png"),
        ("report.docx", "pdf", "report.pdf"),
        ("a.b.c.png", "pdf", "a.b.c.pdf"),
        ("noext", "gif", "noext.gif"),
        ("", "txt", "converted.txt"),
    ])
    def test_derive_output_name(self, original, target, expected):
        assert derive_output_name(original, target) == expected

    @pytest.mark.parametrize("target", ["png", "jpeg", "txt", "html"])
    def test_application_sources_are_named_as_archives(self, target):
        assert resolve_output_subtype(FileType.APPLICATION, target) == "zip"

    @pytest.mark.parametrize("file_type,target", [
        (FileType.IMAGE, "pdf"),
        (FileType.DOCUMENT, "pdf"),
        (FileType.SPREADSHEET, "csv"),
        (FileType.AUDIO, "mp3"),
    ])
    def test_other_sources_keep_target_subtype(self, file_type, target):
        assert resolve_output_subtype(file_type, target) == target
