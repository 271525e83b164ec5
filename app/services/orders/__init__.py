"""
Order, order line, payment and point-of-sale workflows.

Each workflow runs in a single UnitOfWork so that rows and ledger
balances are committed or rolled back together.
"""
