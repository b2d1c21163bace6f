"""
taskslot - find a free calendar slot for a task and book it.
"""

__version__ = "0.1.0"
