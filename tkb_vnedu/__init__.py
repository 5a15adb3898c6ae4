"""Normalize school timetable (TKB) spreadsheets into the VNEDU import sheet."""

__version__ = "0.1.0"
