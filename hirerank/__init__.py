"""
hirerank: deterministic candidate-to-job scoring and ranking.
"""

__version__ = "0.1.0"
