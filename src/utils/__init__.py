"""
Utility modules for ExpertCart.

Cross-cutting concerns:
- Clock: UTC timestamps and their serialized forms
- Storage: Snapshot and bill file I/O
"""
