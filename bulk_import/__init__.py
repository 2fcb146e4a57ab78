"""Bulk spreadsheet import for the pharmacy network back-office.

Parses an uploaded workbook into doctor / specialty records, applies the
shared parameters chosen by the operator, and submits the records in paced
batches to the administrator bulk endpoints.
"""

__version__ = "0.1.0"
