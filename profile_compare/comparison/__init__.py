"""
Comparison core for the Profile Comparison Viewer.

Independent of the UI toolkit; the Textual front end only reads the
projections produced here.

Components:
    - models: Categories, rows, filter mode and session state
    - row_annotator: Pure display annotation of comparison rows
    - DetailCache: Lazy, fetch-once cache of per-row detail
    - ComparisonViewModel: Session state and derived projections
"""
