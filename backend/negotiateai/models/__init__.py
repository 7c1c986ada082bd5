"""
NegotiateAI Backend - ORM Models
=================================

Importing this package registers every table with `Base.metadata`,
which Alembic's env.py relies on for --autogenerate.
"""

from negotiateai.models.user import User
from negotiateai.models.analysis import Analysis
from negotiateai.models.feedback import Feedback

__all__ = ["User", "Analysis", "Feedback"]
