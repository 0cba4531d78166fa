"""Script-to-shotlist extraction via Gemini."""

from shotlist.extraction.extractor import ShotlistExtractor
from shotlist.extraction.parser import parse_shotlist_response, strip_code_fences

__all__ = ["ShotlistExtractor", "parse_shotlist_response", "strip_code_fences"]
