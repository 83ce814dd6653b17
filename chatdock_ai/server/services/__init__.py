"""Service layer shared by the API endpoints."""
