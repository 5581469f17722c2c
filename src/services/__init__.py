"""Application services: one class per use case family.

Services receive the request's ``AsyncSession``, build the repositories they
need and express each operation in domain terms. They flush but never
commit; the request dependency owns the transaction.
"""
