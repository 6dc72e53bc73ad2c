"""
Feature modules for the Ledgerly backend.

Each module keeps its storage behind an interface:
- interfaces.py: Repository protocols the services depend on
- models.py: Pydantic models for data transfer
- repository.py: In-memory and Supabase implementations
- service.py: Business logic
- exceptions.py: Module-specific exceptions

Modules that own HTTP endpoints also carry a routes.py.
"""
