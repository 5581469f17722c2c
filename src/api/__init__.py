"""HTTP boundary of BudgetForge.

Routes translate requests into service calls; middleware adds request
context, logging, security headers and the uniform error body.
"""
