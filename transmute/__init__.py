"""
transmute: file format conversion service.

Uploads are sniffed, classified against the format catalog, dispatched to the
converter for their file type and written out in the requested format.
"""

__version__ = "1.0.0"
