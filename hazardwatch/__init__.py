"""
hazardwatch: hazard feed polling, proximity ranking and alert generation.
"""

__version__ = "0.1.0"
