"""
Guest agent OCI bookkeeping: spec persistence, bundle switching and
guest hook discovery.
"""

__version__ = "0.1.0"
