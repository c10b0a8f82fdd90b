"""
eventgate - analytics event ingestion with portable schema validation.
"""

__version__ = "0.1.0"
