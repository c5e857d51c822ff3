"""Lexiom admin panel: authentication, authorization and audit core"""

__version__ = "1.0.0"
