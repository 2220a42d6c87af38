"""
Talent Console - Authentication & Account Lifecycle Core
Role-based sign-in, recruiter account management and session persistence
for the staffing console.
"""

__version__ = "0.1.0"
