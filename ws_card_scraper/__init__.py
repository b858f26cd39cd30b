"""Weiss Schwarz card database crawler and spreadsheet exporter."""
