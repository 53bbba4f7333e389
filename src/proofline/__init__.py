"""proofline - keep analyzer annotations aligned with a live, editable document."""

__version__ = "0.1.0"
