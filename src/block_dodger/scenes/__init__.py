"""
Block Dodger scenes
"""
