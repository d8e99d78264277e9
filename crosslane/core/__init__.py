"""
Core utilities shared across the cross-lane service.

Configuration, caller identity and logging setup live here so that routers and
services do not read os.environ or request headers directly.
"""
