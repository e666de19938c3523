# =============================================================================
# transmog_catalog/cli/__init__.py -- CLI Module Overview
# =============================================================================
#
# Operator tools that run outside the HTTP server:
#
#   1. HYDRATE (hydrate.py)
#      One hydration pass against the configured cache file, with an
#      optional cap on the number of sets, printing the run report.
#
#   2. STATS (stats.py)
#      Counts of cached sets by expansion, quality and class.
#
#   3. ICONS (icons.py)
#      Token-free icon resolution from the community wiki, recorded in
#      item_cache.json, with optional download of the large icon images.
#
# All commands use argparse and build their own dependencies; they run as
# one-shot scripts, not as part of the long-lived server.
# =============================================================================

"""Command-line tools for the transmog catalog.

- ``python -m transmog_catalog.cli hydrate [--limit N]``
- ``python -m transmog_catalog.cli stats``
- ``python -m transmog_catalog.cli icons [--download DIR]``
"""
