"""payrollmap - reconcile payroll history uploads against a canonical column structure."""

__version__ = "0.1.0"
