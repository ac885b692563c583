"""
Service layer abstraction.

Each service encapsulates business logic for a domain.  The rank
engine is kept free of I/O so it can be exercised on plain snapshots;
``ClientService`` wraps it with database access and transactions.
"""
