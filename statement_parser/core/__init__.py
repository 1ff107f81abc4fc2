"""Text normalization, extractors, bank profiles and arbitration."""
