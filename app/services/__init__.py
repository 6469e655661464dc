# app/services/__init__.py
# This file makes the services directory a Python package.
