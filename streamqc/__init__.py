"""streamqc - grading engine for single-pass sequencing read QC."""

__version__ = "0.1.0"
