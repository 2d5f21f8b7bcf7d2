"""Infrastructure module.

Settings, database session management and logging setup.
"""
