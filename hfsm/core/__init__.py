"""Data model, construction and transition engine."""
