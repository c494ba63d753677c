"""
High-level use cases for the Educacao Especial API.

Each service module orchestrates repositories to implement the business
rules (record CRUD, searches, admin login, admin sessions). Routers call
these services instead of manipulating the stores directly.
"""
