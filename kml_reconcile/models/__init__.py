"""Data models and schemas.

Defines the data structures used throughout the pipeline:
- UploadedAnnotation: Raw uploaded bytes plus declared filename
- MapRecord: A row of the GIS map catalog
- ReconciliationReport: JSON response of delete-by-annotation-file
"""

from kml_reconcile.models.catalog import MapRecord, gis_maps_table, user_access_table
from kml_reconcile.models.report import MatchedMap, ReconciliationReport
from kml_reconcile.models.upload import FileKind, UploadedAnnotation

__all__ = [
    "FileKind",
    "MapRecord",
    "MatchedMap",
    "ReconciliationReport",
    "UploadedAnnotation",
    "gis_maps_table",
    "user_access_table",
]
