"""Database layer - engine, session factory and declarative base."""
