# climate/energy/__init__.py
"""
Energy accounting and reporting.

Modules:
- accountant: Final and periodic runtime flushes into the ledger
- usage_report: Period totals, daily/monthly sums and text reports
"""
