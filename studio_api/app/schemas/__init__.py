"""
Pydantic schemas for request and response bodies.

Documents are exchanged in camelCase (``packageId``, ``assignedTeam``)
to match what the dashboards send and what is stored.  Python code uses
the snake_case attribute names; ``base.CamelModel`` maps between the
two.
"""
