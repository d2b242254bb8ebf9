"""
Tenant Database Provisioning Workflow

This module provisions one SQL Server database per newly created project:
- Eligible work items read from the control database
- Idempotent CREATE DATABASE on the shared server
- Declarative package (.dacpac) and imperative script (.sql) deployment
- Bounded retry of script execution
- Terminal status written back to the work item and its project
"""

__version__ = "1.0.0"
