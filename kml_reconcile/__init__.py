"""KML/KMZ Map Catalog Reconciliation.

Azure Functions service that accepts an uploaded KML or KMZ annotation
file, extracts the area names it describes, and removes the matching
GIS map records from the relational map catalog.
"""

__version__ = "0.1.0"
