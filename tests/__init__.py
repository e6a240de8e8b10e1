"""
tests

Test package for design_bridge.
"""
