"""
Domain Layer

Data holders for registry payloads.
"""
