"""
Qt user interface for the markup engine.
"""
