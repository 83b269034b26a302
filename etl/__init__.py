# WORKFLOW: ETL (Extract, Transform, Load) package for the CT cannabis datasets.
# Used by: CLI entry point, tests
# Modules include:
# 1. socrata.py - Paginated Socrata API client with response caching
# 2. cache.py - .dank data directory and cache files
# 3. measure.py - Measurement value parsing (empty / zero / trace / numeric)
# 4. cleaning.py - Drop records with invalid percentage measurements
# 5. datasets/ - Record models, Socrata endpoints and row builders per dataset
# 6. export.py - CSV, JSON and zstd writers
# 7. pipeline.py - Per-dataset orchestration
#
# ETL flow: Socrata API -> Cache -> Clean -> Record models -> CSV/JSON + relational store

"""
ETL package for the CT cannabis datasets.
"""
