"""
Infrastructure helpers for treegrab: logging, error taxonomy and
rate-limit bookkeeping.
"""
