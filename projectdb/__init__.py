"""Schema introspection and row browsing for per-project external databases"""

__version__ = "0.1.0"
