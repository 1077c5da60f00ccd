"""
Services package

Catalog art pipeline: name normalization, catalog client, XML parsing,
match selection, per-game resolution and the batch backfill.
"""
