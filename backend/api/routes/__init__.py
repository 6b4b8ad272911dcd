"""
Arbor API Routes Package.
"""
