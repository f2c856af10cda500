"""
Review Relay - Google Business Profile reviews proxy for storefronts
"""
__version__ = "1.0.0"
