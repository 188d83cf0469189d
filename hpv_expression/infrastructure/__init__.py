"""
Infrastructure package for the HPV expression pipeline.

This package contains infrastructure components including query execution, data
saving, logging, configuration management, and other cross-cutting concerns.
"""
