"""Core validation engine: document model, extractors, validators and results."""
