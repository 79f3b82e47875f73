"""readlater: personal read-it-later service.

The interesting part of the package is :mod:`readlater.importer`, the bulk
import pipeline that extracts batches of URLs through the scrape provider
with bounded concurrency and streams progress back to the caller.
"""

__version__ = "0.1.0"
