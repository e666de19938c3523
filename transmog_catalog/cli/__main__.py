"""Allow ``python -m transmog_catalog.cli`` execution."""

from transmog_catalog.cli.catalog import main

main()
