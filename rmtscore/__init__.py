"""RMT Score -- reliability scoring for creators of financial tips."""

__version__ = "0.1.0"
