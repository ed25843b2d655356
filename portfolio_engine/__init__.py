"""
portfolio-engine: portfolio state and valuation engine.

Owns a single-session holdings collection, ingests market quotes and
publishes immutable, internally-consistent valuation snapshots.
"""

__version__ = "0.1.0"
