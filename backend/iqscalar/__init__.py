"""
IQScalar assessment engine: non-repeating question allocation, scoring and daily quiz.
"""
