"""Threaded TCP packet and echo servers with a shared data file, plus linked-list containers and a small random generator."""

__version__ = "0.1.0"