"""Domain rules that do not depend on storage or transport.

- **enums**: account, transaction, bill frequency and bill status values
- **ledger**: how each transaction type moves an account balance
- **billing**: due date arithmetic and bill status classification
- **clock**: UTC "now" and "today"
"""
