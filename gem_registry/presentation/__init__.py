"""
Presentation Layer
"""
