"""
Pipeline utilities.
"""
