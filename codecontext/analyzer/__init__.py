"""
Analysis Pipeline

Path filtering, graph building, import resolution, and git co-change analysis.
"""
