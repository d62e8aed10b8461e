"""
Persistence adapters.

Services depend on SQLRepository instead of opening SQLAlchemy sessions
themselves; card slug resolution happens inside the ORM flush
(see bizcard.db.events).
"""
