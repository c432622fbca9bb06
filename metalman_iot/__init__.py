"""IoT energy-consumption workbook parser."""

__version__ = "0.3.0"
