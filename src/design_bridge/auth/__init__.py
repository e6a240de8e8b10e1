"""
design_bridge.auth

Authentication package.

Responsibilities:
- Credential classification and the ordered resolver chain.
- The FastAPI admin gate (Principal injection + uniform 401s).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Only `gate` depends on FastAPI; the rest is framework-free and unit-testable.
