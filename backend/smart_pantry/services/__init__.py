"""
Smart Pantry Backend: Services Layer
=====================================

What:  Business logic between routes (HTTP) and repositories (persistence).
How:   Stateless module-level singletons; every call receives the request's
       AsyncSession and passes it to the repositories.

Service Inventory:
    - UserService: sign-up, login, token refresh
    - FoodItemService: user-scoped pantry CRUD
    - RecipeService: loads the pantry and asks the LLM for a recipe
    - LLMService (abstract) / GeminiService: recipe generation via Google Gemini
"""
