"""
Core package - media access, data models and UI logic.
"""
