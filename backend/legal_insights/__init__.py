# backend/legal_insights/__init__.py
"""Legal Insights: research notebooks with tag-based access control."""
__version__ = "0.1.0"
