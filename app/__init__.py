"""FastAPI Bug Tracker Application.

A FastAPI application for reporting and tracking bugs with:
- RESTful CRUD operations
- Field-level validation with switchable training defects
- A single-slot JSON record store over SQLAlchemy async storage
"""
