"""
Core building blocks: settings, logging, errors and security helpers.
"""
