"""Service implementations for the event ingestion domain."""
