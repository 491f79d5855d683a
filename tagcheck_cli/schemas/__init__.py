"""JSON Schemas for tagcheck reports."""
