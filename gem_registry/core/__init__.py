"""
Core Layer

Configuration, exceptions, protocols and dependency wiring.
"""
