"""docbot — keeps crawled documentation snapshots fresh for the chat layer."""

__version__ = "0.1.0"
