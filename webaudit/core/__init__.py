"""
Core components for the audit engine.

Contains:
- Data models (Issue, artifacts, CheckResult, AuditReport)
- Policy tables (header rules, sensitive patterns)
- Issue sink with severity tally
- Base class for checkers
"""
