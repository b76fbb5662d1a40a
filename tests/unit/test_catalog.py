"""
Unit tests for the format catalog and its lookup helpers.
"""

import pytest

from transmute.config import (
    FORMAT_CATALOG,
    CatalogError,
    FileType,
    FormatEntry,
    validate_catalog,
)
from transmute.utils.catalog_lookup import (
    get_display_label,
    get_file_type,
    get_file_types,
    get_mime_type_for,
    get_subtype_for_extension,
    get_subtypes,
    get_supported_conversions,
    get_supported_formats,
    is_legal_target,
    lookup_mime_type,
)


class TestCatalogInvariants:
    """Test the invariants the catalog is validated against at import."""

    def test_every_subtype_has_one_owner(self):
        seen = set()
        for entries in FORMAT_CATALOG.values():
            for subtype in entries:
                assert subtype not in seen
                seen.add(subtype)

    def test_every_target_is_known_and_not_self(self):
        for entries in FORMAT_CATALOG.values():
            for subtype, entry in entries.items():
                assert entry.targets, f"{subtype} has no targets"
                for target in entry.targets:
                    assert get_file_type(target) is not None
                    assert target != subtype

    def test_xls_is_never_a_target(self):
        """Test xls is read-only."""
        assert all("xls" not in targets for targets in get_supported_conversions().values())

    def test_duplicate_subtype_is_rejected(self):
        catalog = {
            FileType.IMAGE: {"png": FormatEntry("PNG", ("pdf",), ("image/png",))},
            FileType.APPLICATION: {
                "pdf": FormatEntry("PDF", ("png",), ("application/pdf",)),
                "png": FormatEntry("PNG", ("pdf",), ("image/x-png",)),
            },
        }
        with pytest.raises(CatalogError):
            validate_catalog(catalog)

    def test_unknown_target_is_rejected(self):
        catalog = {FileType.IMAGE: {"png": FormatEntry("PNG", ("svg",), ("image/png",))}}
        with pytest.raises(CatalogError, match="unknown subtype"):
            validate_catalog(catalog)

    def test_empty_targets_are_rejected(self):
        catalog = {FileType.IMAGE: {"png": FormatEntry("PNG", (), ("image/png",))}}
        with pytest.raises(CatalogError, match="no conversion targets"):
            validate_catalog(catalog)


class TestCatalogLookup:
    """Test the catalog query helpers."""

    def test_file_types(self):
        assert set(get_file_types()) == set(FileType)

    def test_subtypes_of_file_type(self):
        assert get_subtypes(FileType.IMAGE) == {
            "png": "PNG", "jpeg": "JPEG", "gif": "GIF", "webp": "WEBP", "tiff": "TIFF", "bmp": "BMP",
        }
        assert get_subtypes(FileType.APPLICATION) == {"pdf": "PDF"}

    def test_supported_formats_keep_catalog_order(self):
        assert list(get_supported_formats("png")) == ["jpeg", "gif", "webp", "tiff", "bmp", "pdf"]
        assert get_supported_formats("pdf") == {"png": "PNG", "jpeg": "JPEG", "txt": "Plain Text", "html": "HTML"}

    def test_supported_formats_unknown_subtype(self):
        assert get_supported_formats("svg") == {}

    def test_returned_containers_are_copies(self):
        """Test mutating a lookup result leaves the catalog untouched."""
        formats = get_supported_formats("png")
        formats["svg"] = "SVG"
        get_supported_conversions()["png"].append("svg")
        assert "svg" not in get_supported_formats("png")
        assert "svg" not in get_supported_conversions()["png"]

    @pytest.mark.parametrize("source,target,expected", [
        ("png", "jpeg", True),
        ("png", "png", False),
        ("docx", "pdf", True),
        ("pdf", "docx", False),
        ("csv", "xls", False),
        ("mp3", "wav", True),
        ("svg", "png", False),
    ])
    def test_is_legal_target(self, source, target, expected):
        assert is_legal_target(source, target) is expected

    def test_display_labels(self):
        assert get_display_label("txt") == "Plain Text"
        assert get_display_label("nope") is None

    def test_mime_lookup(self):
        assert lookup_mime_type("image/jpg") == (FileType.IMAGE, "jpeg")
        assert lookup_mime_type("image/x-icon") is None
        assert get_mime_type_for("jpeg") == "image/jpeg"
        assert get_mime_type_for("nope") is None

    @pytest.mark.parametrize("extension,expected", [
        ("jpg", "jpeg"),
        (".JPG", "jpeg"),
        ("tif", "tiff"),
        ("htm", "html"),
        ("docx", "docx"),
        ("svg", None),
        ("", None),
    ])
    def test_extension_lookup(self, extension, expected):
        assert get_subtype_for_extension(extension) == expected

    def test_file_type_labels(self):
        assert FileType.SPREADSHEET.label == "Spreadsheet"
