"""
Mystira: session and scenario engine for children's interactive fiction
"""

__version__ = "0.1.0"
