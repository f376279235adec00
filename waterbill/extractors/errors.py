# waterbill/extractors/errors.py
from __future__ import annotations


class ExtractionError(Exception):
    """Base class for failures that stop one document."""


class RasterizationFailure(ExtractionError):
    pass


class TemplateMissing(ExtractionError):
    pass


class RecognitionFailure(ExtractionError):
    """A single crop could not be read. Callers recover it as an empty field."""


class DateParseFailure(ValueError):
    pass
