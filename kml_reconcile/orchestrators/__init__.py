"""Pipeline orchestration.

- reconcile: Linear normalise → extract → match → delete → report flow
"""
