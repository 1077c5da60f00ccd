"""
Routes package
"""
