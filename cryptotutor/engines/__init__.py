"""
Engines - lesson progression and content/persistence.
"""
