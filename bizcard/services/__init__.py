"""
High-level use cases for the bizcard API.

Each service module orchestrates repositories/adapters to implement business
rules (register, save card, add media, feature a review, export a card...).
Routers call these services instead of touching the database directly.
"""
