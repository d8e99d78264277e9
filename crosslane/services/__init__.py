"""
Use cases of the cross-lane resolution engine.

Each service orchestrates the repository to implement one operation
(register, list the chooser inbox, resolve, sweep). Routers and jobs call
these services instead of touching the store directly.
"""
