"""
Format-specific converter implementations.
"""

from . import audio, document, image, pdf, spreadsheet

__all__ = ['audio', 'document', 'image', 'pdf', 'spreadsheet']
