"""manuscript-press: package manuscripts as EPUB and print PDF, validate
them against distribution requirements, and drive the publishing pipeline."""

__version__ = "0.1.0"
