"""BudgetForge - personal finance backend.

Users keep accounts, post transactions against them, track recurring and
one-off bills, and read budget summaries. The code is split into:

- **api**: FastAPI routes, schemas and middleware
- **services**: use cases that coordinate repositories and domain rules
- **domain**: pure ledger and billing rules
- **infrastructure**: persistence, security and cache adapters
- **core**: configuration, logging, errors and tracing shared by all layers
"""
