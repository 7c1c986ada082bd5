"""
NegotiateAI Backend - API Routes Package
=========================================

Route Inventory:
    - users.py:        /api/users/register, /api/users/login, /api/users/profile
    - analysis.py:     /api/analysis, /api/analysis/improve, /api/analysis/{id}
    - suggestions.py:  /api/suggestions/email, /api/suggestions/chat
    - feedback.py:     /api/feedback, /api/feedback/stats
    - health.py:       /api/health

Routes are thin: they read the request, call a service or pipeline, and
wrap the result in a response model. Business logic lives in services.
"""
