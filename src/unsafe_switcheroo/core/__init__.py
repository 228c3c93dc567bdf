"""
Core Package.

Contains the rewrite pipeline:
- Region discovery and the Idiom Classifier
- Ingredient Extractors and Code Generators
- Edit Planner and assist registration
- Preview rendering, tracing, and the Rewrite Engine
"""
