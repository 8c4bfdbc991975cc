"""Product comparison service.

Compares two product descriptions through a quota-limited text-generation
provider, caching results and degrading to stale answers under failure.
"""

__version__ = "0.1.0"
