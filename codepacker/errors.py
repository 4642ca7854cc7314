# FILE PATH: codepacker/errors.py
# LOCATION: codepacker package
# DESCRIPTION: Exception types raised by the packing pipeline


class CodePackerError(Exception):
    """Base class for codepacker errors."""


class PresetImportError(CodePackerError, ValueError):
    """An imported preset document is malformed or incomplete."""


class UnknownFormatError(CodePackerError, ValueError):
    """An output format outside plain/xml/json/markdown/tree was requested."""
