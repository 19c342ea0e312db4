"""
Infrastructure Layer

HTTP clients and cache implementations.
"""
