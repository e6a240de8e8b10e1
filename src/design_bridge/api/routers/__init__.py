"""
design_bridge.api.routers

Router modules (health, auth, admin).
"""
