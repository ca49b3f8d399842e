"""
Quota — Consistency Checking

Compares directory quota counters reported by the filesystem with totals
recomputed through metaclient, and formats the results for display.
"""
