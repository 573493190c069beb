"""fuzzgen: aggregate remote text lists into deduplicated fuzzing wordlists."""

__version__ = "0.3.0"
