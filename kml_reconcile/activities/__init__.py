"""Pipeline stages for delete-by-annotation-file.

Each module implements one stage: normalise the upload, extract area
names, match them against the catalog, and delete the matched records.
"""
