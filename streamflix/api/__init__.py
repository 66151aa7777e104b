"""HTTP routes"""
