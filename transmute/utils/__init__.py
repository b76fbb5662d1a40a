"""
Shared utilities for transmute: catalog queries, content sniffing, naming,
error handling, logging, codec runtime and output storage.
"""
