"""
Blog Platform API.
"""
