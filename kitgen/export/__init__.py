"""
Export module for the Deluge kit generator.

Handles writing kits to the Deluge patch format.
"""

from .export_deluge_kit import DelugeKitExporter

__all__ = ['DelugeKitExporter']
