"""Web Performance Checker.

Runs Lighthouse audits against submitted URLs, stores the scores and
renders them as a dashboard with history charts.
"""
__version__ = "1.0.0"
