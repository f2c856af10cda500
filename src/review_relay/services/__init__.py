"""
Upstream Google service clients
"""
