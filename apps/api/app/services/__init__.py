"""Onboarding services: plain functions over a SQLAlchemy session."""
