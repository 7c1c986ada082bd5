"""
NegotiateAI Backend - Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - ModelGateway (abstract): chat-style completion contract
    - GeminiGateway: Google Gemini implementation of the gateway
    - prompts: industry table and prompt builders
    - response_normalizer: model text → validated structure, or fallback
    - AnalysisPipeline: analyze / improve negotiation text
    - SuggestionPipeline: email / chat suggestions
    - AnalysisService, FeedbackService, UserService: persistence-backed
      operations behind the HTTP routes
"""
