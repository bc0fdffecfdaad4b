"""
Crypto Tutor - lesson progression service for cryptocurrency courses.
"""

__version__ = "0.3.0"
