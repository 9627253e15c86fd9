"""FJSON codecs, SQL filter and projection building, and SAP HANA document-store helpers."""

__version__ = "0.1.0"