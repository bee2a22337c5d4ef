"""
Repositories package — data-access layer.

Each repository file handles all DB operations for one domain entity.
Repositories do NOT handle HTTP concerns or business logic beyond
basic data integrity.

Convention:
    - One file per aggregate root (e.g., users.py, policies.py)
    - All functions accept `AsyncSession` as the first argument
    - Use `flush()` internally; commit/rollback belongs to the caller
      that opened the transaction (resolver, scheduler, pipeline)
    - Inserts go through `base.insert`, which turns a unique-constraint
      violation into `UniquenessConflict`
"""
