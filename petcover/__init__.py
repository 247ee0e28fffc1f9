"""
petcover - Benefit Adjudication Engine for pet health plans.

Decides whether a requested procedure is covered for a pet under its plan,
whether a waiting period or annual usage cap blocks it, and how the value is
split between insurer and client.
"""

__version__ = "0.1.0"
