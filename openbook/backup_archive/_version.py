"""Build-time application version, recorded in every OpenbookProps header."""

__version__ = "0.66.0"
