"""Trader Negotiation Core"""
__version__ = "0.1.0"
