"""Employee directory — Employee model, schemas and service."""

from breakbook.employees.models import Employee

__all__ = ["Employee"]
