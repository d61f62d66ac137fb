"""
Kernel: models, identity and audit trail.
"""
