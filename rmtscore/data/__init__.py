"""Data ingestion: CSV import of resolved tips."""
