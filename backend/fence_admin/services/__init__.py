"""Services module.

This module provides the service layer architecture:
- exceptions: Custom service exceptions
- leads: Lead and quote creation and lifecycle
- jobs: Job and invoice creation
"""
