"""
Test suite for Product Scout.

Covers link classification, the crawl engine, sitemap discovery,
the batch pipeline, configuration and the CLI.
"""
