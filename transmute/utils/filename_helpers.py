"""
Output file naming helpers.
"""

import re

from ..config import ARCHIVE_SUBTYPE, FileType

DEFAULT_STEM = "converted"


def file_stem(filename: str) -> str:
    """
    Strip directory components and exactly the final extension from a filename.

    Falls back to ``converted`` when nothing is left (empty names, dotfiles).
    """
    base = re.split(r"[\\/]", filename or "")[-1]
    stem = base.rsplit(".", 1)[0] if "." in base else base
    return stem or DEFAULT_STEM


def derive_output_name(original_filename: str, target_subtype: str) -> str:
    """
    Build the output filename for a conversion.

    Examples:
        >>> derive_output_name("photo.jpg", "png")
        'photo.png'
        >>> derive_output_name("a.b.c.png", "pdf")
        'a.b.c.pdf'
        >>> derive_output_name("noext", "gif")
        'noext.gif'
    """
    return f"{file_stem(original_filename)}.{target_subtype}"


def resolve_output_subtype(source_type: FileType, target_subtype: str) -> str:
    """
    Get the subtype the output file is named with.

    Outputs of APPLICATION sources are always named as zip archives,
    whatever target was requested.
    """
    if source_type == FileType.APPLICATION:
        return ARCHIVE_SUBTYPE
    return target_subtype
