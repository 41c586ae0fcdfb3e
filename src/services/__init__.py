"""
Service implementations for ExpertCart.

Contains the modules that operate on the shared repository:
- Scoring Engine (trust-weighted expert scores, user means)
- Review Admission
- Order/Billing Engine
- Auth (signup, login, role capabilities)
- Catalog
- Sales Report
"""
