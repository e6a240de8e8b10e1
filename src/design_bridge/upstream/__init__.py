"""
design_bridge.upstream

Upstream platform client package.

Responsibilities:
- Provide the HTTP boundary used to validate sessions/tokens and log users in.
- Define the upstream failure taxonomy.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The auth layer depends on this boundary (not on httpx directly).
