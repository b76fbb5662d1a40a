"""
Image conversion.

Decodes and encodes raster images with Pillow; image to PDF embeds the
picture with img2pdf.
"""

from io import BytesIO

import img2pdf
from PIL import Image

from ...config import FileType
from ..base_converter import FormatConverter

# Catalog subtype -> Pillow format name
PILLOW_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "gif": "GIF",
    "webp": "WEBP",
    "tiff": "TIFF",
    "bmp": "BMP",
}

# Modes each encoder accepts without conversion
ENCODER_MODES = {
    "JPEG": ("RGB", "L", "CMYK"),
    "BMP": ("RGB", "L", "P", "1"),
    "WEBP": ("RGB", "RGBA"),
    "GIF": ("P", "L", "RGB", "RGBA"),
    "PNG": ("RGB", "RGBA", "L", "LA", "P", "1", "I;16"),
    "TIFF": ("RGB", "RGBA", "L", "LA", "P", "1", "CMYK", "I;16"),
}


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def flatten(image: Image.Image, background=(255, 255, 255)) -> Image.Image:
    """Composite an image onto an opaque background and return it in RGB mode."""
    if not _has_alpha(image):
        return image.convert("RGB")
    rgba = image.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, background)
    canvas.paste(rgba, mask=rgba.getchannel("A"))
    return canvas


def prepare_mode(image: Image.Image, pillow_format: str) -> Image.Image:
    """Convert an image to a mode the target encoder can write."""
    if image.mode in ENCODER_MODES[pillow_format]:
        return image
    if pillow_format in ("JPEG", "BMP"):
        return flatten(image)
    return image.convert("RGBA" if _has_alpha(image) else "RGB")


def encode_image(image: Image.Image, subtype: str) -> bytes:
    """
    Encode a Pillow image as a catalog image subtype.

    Args:
        image: Decoded image
        subtype: Target subtype (e.g. 'png', 'jpeg')

    Returns:
        Encoded image bytes
    """
    pillow_format = PILLOW_FORMATS[subtype]
    output = BytesIO()
    prepare_mode(image, pillow_format).save(output, format=pillow_format)
    return output.getvalue()


class ImageConverter(FormatConverter):
    """Converter for raster image subtypes."""

    file_type = FileType.IMAGE

    def _convert(self, target_subtype: str, content: bytes) -> bytes:
        with Image.open(BytesIO(content)) as image:
            # animated inputs keep their first frame only
            image.seek(0)
            image.load()
            if target_subtype == "pdf":
                return self._to_pdf(image, content)
            return encode_image(image, target_subtype)

    def _to_pdf(self, image: Image.Image, content: bytes) -> bytes:
        # img2pdf embeds JPEG data as-is; everything else goes through an opaque PNG
        if self.subtype == "jpeg" and image.mode in ("RGB", "L"):
            return img2pdf.convert(content)
        return img2pdf.convert(encode_image(flatten(image), "png"))
