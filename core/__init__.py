"""Core domain logic for health dashboard analytics.

This package contains the aggregation engine and domain models,
isolated from storage and transport for easy testing and reasoning.
"""
