"""
WorkHub backend: multi-tenant projects, time tracking, quotes, teams,
holidays, client portal and internal chat.
"""
__version__ = "1.0.0"
