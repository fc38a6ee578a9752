"""
Scanning services.

The dijet-mass event loop and its statistics collector.
"""

from .dijet_scanner import DijetMassScanner, ScanStatisticsCollector

__all__ = [
    "DijetMassScanner",
    "ScanStatisticsCollector",
]
