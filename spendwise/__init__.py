"""
SpendWise - Source Package

A personal-finance tracking backend: users, one running budget per
user, and the spending records that draw it down.

DESIGN PRINCIPLES:
1. The budget is never negative
2. A record and its budget effect are written together or not at all
3. Fail early, fail visibly
4. Every change to a user's money is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SpendWise Team"
