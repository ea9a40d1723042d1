"""SQLAlchemy ORM models for the SQL drink store."""
