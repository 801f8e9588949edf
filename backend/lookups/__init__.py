"""Payroll-record lookup audit module for ReciboWatch.

Provides:
- Lookup log parsing into normalized events
- Per-user behavior profiles with suspicion scoring (0-100)
- Per-subject exposure profiles with exposure scoring (0-100)
- Dataset summary, chart datasets and timeline grouping
- Table search/sort/pagination helpers
- Spreadsheet (xlsx) export
"""
