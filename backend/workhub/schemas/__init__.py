"""
Pydantic schemas for API request/response validation.

Provides data models for time entries, teams, settings, holidays, quotes,
projects and clients, chat, the client portal and the audit trail.
"""
