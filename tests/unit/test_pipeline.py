"""
Unit tests for the conversion pipeline.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO

import pytest
from PIL import Image

from transmute.classifier import classify
from transmute.config import FileType
from transmute.pipeline import ConversionRequest, PipelineStage
from transmute.utils.error_handling import (
    ConversionCancelled,
    ConversionFailed,
    UnknownFileType,
    UnsupportedMimeType,
    UnsupportedSubType,
)

from samples import archive_members, make_csv, make_image, make_pdf, requires_weasyprint, sample_for

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestPipelineScenarios:
    """End-to-end runs from a sniffed MIME string to a named output."""

    def test_jpeg_to_png(self, pipeline):
        converted = pipeline.run("image/jpeg", make_image("jpeg"), "photo.jpg", "png")
        assert converted.filename == "photo.png"
        assert converted.file_type == FileType.IMAGE
        assert Image.open(BytesIO(converted.content)).format == "PNG"

    @requires_weasyprint
    def test_docx_to_pdf(self, pipeline):
        converted = pipeline.run(DOCX_MIME, sample_for("docx"), "report.docx", "pdf")
        assert converted.filename == "report.pdf"
        assert converted.file_type == FileType.APPLICATION
        assert converted.content.startswith(b"%PDF")

    @pytest.mark.parametrize("mime_type", ["video/mp4", "chemical/x-pdb", "not-a-mime"])
    def test_unknown_mime_type(self, pipeline, mime_type):
        with pytest.raises(UnsupportedMimeType):
            pipeline.run(mime_type, b"data", "clip.mp4", "png")

    def test_illegal_target(self, pipeline):
        with pytest.raises(ConversionFailed):
            pipeline.run("image/png", make_image("png"), "photo.png", "docx")

    def test_unknown_target(self, pipeline):
        with pytest.raises(ConversionFailed, match="Unknown target"):
            pipeline.run("image/png", make_image("png"), "photo.png", "svg")

    def test_unregistered_subtype(self, pipeline):
        with pytest.raises(UnsupportedSubType):
            pipeline.run("image/x-icon", b"\x00\x00\x01\x00", "favicon.ico", "png")

    def test_pdf_outputs_are_named_as_archives(self, pipeline):
        converted = pipeline.run("application/pdf", make_pdf(pages=2), "slides.pdf", "png")
        assert converted.filename == "slides.zip"
        assert converted.file_type == FileType.APPLICATION
        assert [name for name, _ in archive_members(converted.content)] == ["slides-1.png", "slides-2.png"]

    def test_spreadsheet_to_html_is_a_document(self, pipeline):
        converted = pipeline.run("text/csv", make_csv(), "inventory.csv", "html")
        assert converted.filename == "inventory.html"
        assert converted.file_type == FileType.DOCUMENT

    def test_missing_filename(self, pipeline):
        converted = pipeline.run("image/png", make_image("png"), "", "gif")
        assert converted.filename == "converted.gif"


class TestPipelineStages:
    """Test stage reporting and cancellation."""

    def test_stages_in_order(self, pipeline):
        stages = []
        pipeline.run("image/png", make_image("png"), "photo.png", "jpeg", on_stage=stages.append)
        assert stages == list(PipelineStage)

    def test_failure_stops_at_stage(self, pipeline):
        stages = []
        with pytest.raises(UnsupportedSubType):
            pipeline.run("image/x-icon", b"data", "favicon.ico", "png", on_stage=stages.append)
        assert stages[-1] == PipelineStage.FACTORY_BUILT

    def test_cancelled_before_start(self, pipeline):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ConversionCancelled) as exc_info:
            pipeline.run("image/png", make_image("png"), "photo.png", "jpeg", cancel_event=cancel)
        assert exc_info.value.status_code == 408

    def test_cancelled_mid_run(self, pipeline):
        cancel = threading.Event()
        stages = []

        def on_stage(stage):
            stages.append(stage)
            if stage == PipelineStage.CONVERTER_BUILT:
                cancel.set()

        with pytest.raises(ConversionCancelled, match="converted"):
            pipeline.run("image/png", make_image("png"), "photo.png", "jpeg", cancel_event=cancel, on_stage=on_stage)
        assert stages[-1] == PipelineStage.CONVERTER_BUILT


class TestPipelineConvert:
    """Test conversion of already classified requests."""

    def test_convert_request(self, pipeline):
        request = ConversionRequest(
            source_bytes=make_image("bmp"),
            source_type=FileType.IMAGE,
            source_subtype="bmp",
            target_subtype="tiff",
            original_filename="scan.bmp",
        )
        result = pipeline.convert(request)
        assert result.output_file_type == FileType.IMAGE
        assert Image.open(BytesIO(result.output_bytes)).format == "TIFF"

    def test_convert_unknown_file_type(self, pipeline):
        request = ConversionRequest(b"data", "video", "mp4", "png")
        with pytest.raises(UnknownFileType):
            pipeline.convert(request)

    def test_supported_formats(self, pipeline):
        assert list(pipeline.supported_formats("application/pdf")) == ["png", "jpeg", "txt", "html"]
        assert pipeline.supported_formats("text/plain; charset=us-ascii") == {
            "pdf": "PDF", "html": "HTML", "docx": "DOCX",
        }

    def test_supported_formats_unknown_mime(self, pipeline):
        with pytest.raises(UnsupportedMimeType):
            pipeline.supported_formats("video/mp4")

    def test_detect(self, pipeline):
        file_type, subtype, formats = pipeline.detect("text/csv")
        assert (file_type, subtype) == (FileType.SPREADSHEET, "csv")
        assert formats == pipeline.supported_formats("text/csv")

    def test_detect_classifies_once(self, pipeline, monkeypatch):
        calls = []

        def counting_classify(mime_type):
            calls.append(mime_type)
            return classify(mime_type)

        monkeypatch.setattr("transmute.pipeline.classify", counting_classify)
        pipeline.detect("image/png")
        assert calls == ["image/png"]


class TestPipelineConcurrency:
    """One pipeline instance serves concurrent requests independently."""

    def test_concurrent_runs_are_isolated(self, pipeline):
        colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]

        def convert(index):
            color = colors[index % len(colors)]
            converted = pipeline.run("image/png", make_image("png", color=color), f"img{index}.png", "bmp")
            return index, converted

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(convert, range(16)))

        for index, converted in results:
            assert converted.filename == f"img{index}.bmp"
            image = Image.open(BytesIO(converted.content)).convert("RGB")
            assert image.getpixel((0, 0)) == colors[index % len(colors)]

    def test_source_bytes_are_not_modified(self, pipeline):
        source = make_pdf(pages=1)
        snapshot = bytes(source)
        pipeline.run("application/pdf", source, "doc.pdf", "txt")
        assert source == snapshot


class TestRoundTrips:
    """Converting A -> B -> A keeps the content for lossless pairs."""

    def test_png_bmp_png(self, pipeline):
        source = make_image("png", color=(12, 34, 56))
        there = pipeline.run("image/png", source, "swatch.png", "bmp")
        back = pipeline.run("image/bmp", there.content, there.filename, "png")
        assert back.filename == "swatch.png"
        original = Image.open(BytesIO(source)).convert("RGB")
        restored = Image.open(BytesIO(back.content)).convert("RGB")
        assert list(restored.getdata()) == list(original.getdata())

    def test_csv_xlsx_csv(self, pipeline):
        there = pipeline.run("text/csv", make_csv(), "inventory.csv", "xlsx")
        xlsx_mime = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        back = pipeline.run(xlsx_mime, there.content, there.filename, "csv")
        assert back.content == make_csv()

    def test_txt_html_txt(self, pipeline):
        there = pipeline.run("text/plain", b"first line\nsecond line\n", "notes.txt", "html")
        back = pipeline.run("text/html", there.content, there.filename, "txt")
        assert back.content.decode("utf-8").splitlines() == ["first line", "second line"]


class TestClassificationIsDeterministic:

    def test_repeated_runs_agree(self, pipeline):
        content = make_image("gif")
        first = pipeline.run("image/gif", content, "anim.gif", "png")
        second = pipeline.run("image/gif", content, "anim.gif", "png")
        assert first == second
