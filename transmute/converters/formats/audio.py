"""
Audio conversion through pydub, which delegates decoding and encoding to ffmpeg.
"""

from io import BytesIO

from pydub import AudioSegment

from ...config import FileType
from ..base_converter import FormatConverter

# Catalog subtype -> (ffmpeg container, codec override)
PYDUB_FORMATS = {
    "mp3": ("mp3", None),
    "wav": ("wav", None),
    "ogg": ("ogg", "libvorbis"),
    "flac": ("flac", None),
}

LOSSY_SUBTYPES = {"mp3", "ogg"}


class AudioConverter(FormatConverter):
    """Converter for audio subtypes."""

    file_type = FileType.AUDIO

    def _convert(self, target_subtype: str, content: bytes) -> bytes:
        source_format, _ = PYDUB_FORMATS[self.subtype]
        target_format, codec = PYDUB_FORMATS[target_subtype]

        audio = AudioSegment.from_file(BytesIO(content), format=source_format)

        export_options = {"format": target_format}
        if codec:
            export_options["codec"] = codec
        if target_subtype in LOSSY_SUBTYPES:
            export_options["bitrate"] = self.settings.audio_bitrate

        output = BytesIO()
        audio.export(output, **export_options)
        return output.getvalue()
