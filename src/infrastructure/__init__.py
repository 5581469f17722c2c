"""Infrastructure layer: persistence, cache and credential handling.

- **database**: async SQLAlchemy engine, sessions, models, base repository
- **repositories**: per-aggregate queries scoped to the owning user
- **cache**: Redis key/value cache
- **security**: bcrypt password hashing and JWT issuance
"""
