"""
Arbor API Package.

FastAPI REST API over the Merkle tree core.
Requires Python 3.11+.
"""

# Import app lazily to avoid circular imports
# Use: from api.main import app
