"""
EduOpps - School Career Opportunities Platform
Schools publish career opportunities; students browse and register.

Architecture:
- PostgreSQL: Schools, users, roles, opportunities, registrations, news
- MongoDB GridFS (or local disk): Uploaded opportunity documents
- SMTP: Application forms e-mailed as signed download links
"""

__version__ = "1.0.0"
