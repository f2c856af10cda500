"""
Core configuration, logging and upstream plumbing
"""
