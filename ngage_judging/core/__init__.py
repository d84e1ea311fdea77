"""
Core Package - Ngage Judging Engine
ngage_judging/core/__init__.py

Core infrastructure: dependencies, exceptions.
"""
