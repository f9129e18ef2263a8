"""
Version 1 of the Store Records API.
"""
