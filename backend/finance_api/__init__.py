"""
Finance API: per-user record management for categories, transaction
sources and financial goals.
"""
