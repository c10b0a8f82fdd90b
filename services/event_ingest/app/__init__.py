"""Event ingestion service: validated event intake and LTV queries."""
