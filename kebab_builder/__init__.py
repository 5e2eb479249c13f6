"""
                        Kebab Builder

Online kebab storefront backend: catalog, composition pricing,
order materialization and tiered AI image generation with a
deterministic local vector fallback.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
