"""
Application Layer

Orchestrates domain objects and infrastructure ports to fulfill use cases.

Structure:
- services/: The queue application service and its result models
- interfaces/: Port interfaces for infrastructure adapters
"""
