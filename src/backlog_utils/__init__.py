"""Backlog utilities - command-line client for the Backlog wiki API"""

__version__ = "0.0.1"
