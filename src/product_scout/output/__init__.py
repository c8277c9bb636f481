"""Output module for Product Scout."""

from product_scout.output.writer import output_path_for, write_product_urls

__all__ = ["output_path_for", "write_product_urls"]
