"""
TPO Portal
Training & Placement Office backend for students, companies, faculty and admins.

Architecture:
- Relational store (PostgreSQL in production) via SQLAlchemy raw SQL
- JWT bearer sessions
- Faculty roll-number range scoping, student approvals, audit trail
"""

__version__ = "1.0.0"
