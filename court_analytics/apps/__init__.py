"""
Application interfaces for court analytics
"""
