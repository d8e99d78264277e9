"""
Persistence adapters.

Services depend on the repository instead of building SQL themselves. Reads
open their own session; writes that must be atomic take the session yielded by
``transaction()`` so the caller controls the commit boundary.
"""
