"""
Talent Console - Core Module
"""
