"""Core reconciliation logic for modkeeper."""
