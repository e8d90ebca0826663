"""
Ethical Job Board
Job board and community platform for ethical workplaces.

Architecture:
- PostgreSQL: all structured data through SQLAlchemy models
- FastAPI: REST API under /api
- Local disk: uploaded images, CVs and resumes
"""

__version__ = "1.0.0"
